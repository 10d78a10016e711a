# routes/restaurant_routes.py
from fastapi import APIRouter, Depends, Path, Query, Request
from core.dependencies import CurrentUser, ensure_restaurant_access, require_role
from core.exceptions import AppException
from core.responses import MESSAGE_STYLE, STATUS_STYLE, fail, from_exception, ok, respond
from models.restaurant import REQUIRED_DOCUMENTS
from services.earning_service import get_earning_summary
from services.menu_service import get_restaurant_menu
from services.restaurant_service import (
    add_kyc, add_service_area, create_restaurant, delete_restaurant, get_kyc, get_restaurant,
    list_restaurants, update_business_hours, update_restaurant,
)
from services.upload_service import DocumentUploader, get_uploader
from utils.files import discard_staged, stage_upload
from utils.forms import form_to_payload, read_request_payload
from utils.logger import get_logger

logger = get_logger("Restaurant_Route")
router = APIRouter(prefix="/restaurants", tags=["Restaurants"])

restaurant_manager = require_role("restaurant_admin", "superadmin")

# Public: restaurant self-onboarding
@router.post("", status_code=201)
async def api_create_restaurant(request: Request, uploader: DocumentUploader = Depends(get_uploader)):
    staged = []
    try:
        form = await request.form()
        payload, files = form_to_payload(form)
        documents = {}
        for field in REQUIRED_DOCUMENTS:
            if files.get(field):
                documents[field] = stage_upload(files[field][0])
                staged.append(documents[field])
        images = [stage_upload(f) for f in files.get("images", [])]
        staged.extend(images)
        result = await create_restaurant(payload, documents, images, uploader)
        return respond(
            ok("Restaurant created successfully", data=result.model_dump(), status_code=201, code="RESTAURANT_CREATED"),
            STATUS_STYLE,
        )
    except AppException as e:
        return respond(from_exception(e), STATUS_STYLE)
    except Exception:
        logger.exception("Error creating restaurant")
        return respond(fail(500, "INTERNAL_ERROR", "Something went wrong"), STATUS_STYLE)
    finally:
        discard_staged(staged)

# Public: list restaurants, KYC documents are never part of the listing
@router.get("")
async def api_list_restaurants(
    approval_status: str | None = Query(None, alias="approvalStatus"),
    skip: int = Query(0, ge=0),
    limit: int = Query(0, ge=0, le=200),
):
    try:
        restaurants = await list_restaurants(approval_status=approval_status, skip=skip, limit=limit)
        return respond(ok("Restaurants fetched successfully.", data={"count": len(restaurants), "restaurants": restaurants}))
    except AppException as e:
        return respond(from_exception(e))
    except Exception:
        logger.exception("Error listing restaurants")
        return respond(fail(500, "INTERNAL_ERROR", "Failed to fetch restaurants."))

@router.get("/{restaurant_id}")
async def api_get_restaurant(restaurant_id: str = Path(...)):
    try:
        restaurant = await get_restaurant(restaurant_id)
        return respond(ok("Restaurant fetched successfully.", data=restaurant))
    except AppException as e:
        return respond(from_exception(e))
    except Exception:
        logger.exception("Error fetching restaurant")
        return respond(fail(500, "INTERNAL_ERROR", "Server error."))

@router.put("/{restaurant_id}")
async def api_update_restaurant(
    request: Request,
    restaurant_id: str = Path(...),
    current_user: CurrentUser = Depends(restaurant_manager),
    uploader: DocumentUploader = Depends(get_uploader),
):
    staged = []
    try:
        ensure_restaurant_access(current_user, restaurant_id)
        payload, files = await read_request_payload(request)
        if not payload and not files:
            return respond(fail(400, "EMPTY_BODY", "Request body is missing."))
        staged = [stage_upload(f) for f in files.get("images", [])]
        restaurant = await update_restaurant(restaurant_id, payload, staged, uploader, actor_email=current_user.email)
        return respond(ok("Restaurant updated successfully.", data=restaurant))
    except AppException as e:
        return respond(from_exception(e))
    except Exception:
        logger.exception("Error updating restaurant")
        return respond(fail(500, "INTERNAL_ERROR", "Server error."))
    finally:
        discard_staged(staged)

@router.delete("/{restaurant_id}")
async def api_delete_restaurant(restaurant_id: str = Path(...), current_admin: CurrentUser = Depends(require_role("superadmin"))):
    try:
        await delete_restaurant(restaurant_id, actor_email=current_admin.email)
        return respond(ok("Restaurant and its permissions deleted successfully.", data={"restaurantId": restaurant_id}))
    except AppException as e:
        return respond(from_exception(e))
    except Exception:
        logger.exception("Error deleting restaurant")
        return respond(fail(500, "INTERNAL_ERROR", "Server error."))

@router.put("/{restaurant_id}/business-hours")
async def api_update_business_hours(
    request: Request,
    restaurant_id: str = Path(...),
    current_user: CurrentUser = Depends(restaurant_manager),
):
    try:
        ensure_restaurant_access(current_user, restaurant_id)
        payload, _ = await read_request_payload(request)
        hours = await update_business_hours(restaurant_id, payload.get("businessHours"), actor_email=current_user.email)
        return respond(ok("Business hours updated successfully.", data={"businessHours": hours}))
    except AppException as e:
        return respond(from_exception(e))
    except Exception:
        logger.exception("Error updating business hours")
        return respond(fail(500, "INTERNAL_ERROR", "Server error."))

@router.post("/{restaurant_id}/kyc")
async def api_add_kyc(
    request: Request,
    restaurant_id: str = Path(...),
    current_user: CurrentUser = Depends(restaurant_manager),
    uploader: DocumentUploader = Depends(get_uploader),
):
    staged = []
    try:
        ensure_restaurant_access(current_user, restaurant_id)
        _, files = await read_request_payload(request)
        staged = [stage_upload(f) for uploads in files.values() for f in uploads]
        restaurant = await add_kyc(restaurant_id, staged, uploader, actor_email=current_user.email)
        return respond(ok("KYC documents uploaded successfully.", data=restaurant))
    except AppException as e:
        return respond(from_exception(e))
    except Exception:
        logger.exception("KYC upload error")
        return respond(fail(500, "INTERNAL_ERROR", "Server error while uploading KYC."))
    finally:
        discard_staged(staged)

@router.get("/{restaurant_id}/kyc")
async def api_get_kyc(restaurant_id: str = Path(...), current_user: CurrentUser = Depends(restaurant_manager)):
    try:
        ensure_restaurant_access(current_user, restaurant_id)
        kyc = await get_kyc(restaurant_id)
        return respond(ok("KYC details fetched successfully.", data=kyc))
    except AppException as e:
        return respond(from_exception(e))
    except Exception:
        logger.exception("Error fetching KYC")
        return respond(fail(500, "INTERNAL_ERROR", "Server error while fetching KYC."))

@router.post("/{restaurant_id}/service-areas")
async def api_add_service_area(
    request: Request,
    restaurant_id: str = Path(...),
    current_user: CurrentUser = Depends(restaurant_manager),
):
    try:
        ensure_restaurant_access(current_user, restaurant_id)
        payload, _ = await read_request_payload(request)
        areas = await add_service_area(restaurant_id, payload.get("serviceAreas"), actor_email=current_user.email)
        return respond(ok("Service areas updated successfully", data=areas))
    except AppException as e:
        return respond(from_exception(e))
    except Exception:
        logger.exception("Error updating service areas")
        return respond(fail(500, "INTERNAL_ERROR", "Server error"))

# Public: categorized menu
@router.get("/{restaurant_id}/menu")
async def api_get_menu(restaurant_id: str = Path(...)):
    try:
        menu = await get_restaurant_menu(restaurant_id)
        return respond(ok("Menu fetched successfully", data=menu))
    except AppException as e:
        return respond(from_exception(e))
    except Exception:
        logger.exception("Error fetching menu")
        return respond(fail(500, "INTERNAL_ERROR", "Failed to fetch restaurant menu"))

@router.get("/{restaurant_id}/earnings/summary")
async def api_get_earning_summary(restaurant_id: str = Path(...), current_user: CurrentUser = Depends(restaurant_manager)):
    try:
        ensure_restaurant_access(current_user, restaurant_id)
        summary = await get_earning_summary(restaurant_id)
        return respond(ok("Earning summary fetched successfully", data={"summary": summary.model_dump()}), STATUS_STYLE)
    except AppException as e:
        return respond(from_exception(e), STATUS_STYLE)
    except Exception:
        logger.exception("Error fetching earning summary")
        return respond(fail(500, "INTERNAL_ERROR", "Failed to fetch earning summary"), STATUS_STYLE)
