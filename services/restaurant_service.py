# services/restaurant_service.py
import re
import secrets
import string
from datetime import datetime
from pymongo.errors import PyMongoError
from core.exceptions import RequestValidationFailed, UpstreamFailure
from models.restaurant import RestaurantOnboarding, OnboardingResult
from services import restaurant_store
from services.permission_service import create_default_permission, delete_permission
from services.upload_service import DocumentUploader, UploadError, upload_optional, upload_required
from services.validation import (
    ValidationFailure, validate_business_hours, validate_onboarding, validate_restaurant_update,
    validate_service_areas,
)
from settings.config import settings
from utils.hash import hash_password
from utils.logger import get_logger

logger = get_logger("Restaurant_Service")

SLUG_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
SLUG_SUFFIX_LENGTH = 4

def slugify(name: str) -> str:
    # simple slugify: lower, non-alphanum -> -, remove duplicates
    s = name.lower()
    s = re.sub(r'[^a-z0-9]+', '-', s).strip('-')
    return s[:100]

def make_slug(name: str, city: str) -> str:
    # collisions are not checked, the random suffix keeps them unlikely
    suffix = "".join(secrets.choice(SLUG_SUFFIX_ALPHABET) for _ in range(SLUG_SUFFIX_LENGTH))
    return f"{slugify(name)}-{slugify(city)}-{suffix}"

def _raise_if_failed(result):
    if isinstance(result, ValidationFailure):
        raise RequestValidationFailed(result)
    return result

def build_restaurant_document(onboarding: RestaurantOnboarding, password_hash: str, document_urls: dict[str, str], image_urls: list[str]) -> dict:
    now = datetime.utcnow()
    return {
        "name": onboarding.name,
        "slug": make_slug(onboarding.name, onboarding.address.city),
        "owner_name": onboarding.owner_name,
        "phone": onboarding.phone,
        "email": onboarding.email,
        "password": password_hash,
        "address": onboarding.address.model_dump(),
        "location": onboarding.location.model_dump(),
        "opening_hours": onboarding.opening_hours,
        "business_hours": {},
        "food_type": onboarding.food_type,
        "min_order_amount": onboarding.min_order_amount,
        "payment_methods": onboarding.payment_methods,
        "kyc": onboarding.kyc.model_dump(),
        "kyc_documents": {
            "fssai_doc_url": document_urls["fssaiDoc"],
            "gst_doc_url": document_urls["gstDoc"],
            "aadhar_doc_url": document_urls["aadharDoc"],
            "additional": [],
        },
        "kyc_status": "pending",
        "approval_status": "pending",
        "is_active": True,
        "service_areas": [],
        "images": image_urls,
        "created_at": now,
        "updated_at": now,
    }

async def create_restaurant(payload: dict, documents: dict[str, str], images: list[str], uploader: DocumentUploader) -> OnboardingResult:
    """
    Onboard a restaurant.

    payload is the raw form (nested address), documents maps the mandatory
    document field names to staged local paths and images holds optional
    staged image paths. Validation happens before anything is uploaded or
    written; a failed permission grant removes the restaurant again.
    """
    onboarding = _raise_if_failed(
        validate_onboarding(payload, documents.keys(), settings.DEFAULT_MIN_ORDER_AMOUNT)
    )
    password_hash = hash_password(onboarding.password)

    try:
        document_urls = await upload_required(uploader, documents)
    except UploadError:
        logger.exception("KYC document upload failed, restaurant not created")
        raise UpstreamFailure("DOCUMENT_UPLOAD_FAILED", "Document upload failed")
    image_urls = await upload_optional(uploader, images)

    doc = build_restaurant_document(onboarding, password_hash, document_urls, image_urls)
    restaurant_id = await restaurant_store.create(doc)

    try:
        await create_default_permission(restaurant_id)
    except PyMongoError:
        logger.exception("Permission bootstrap failed, removing restaurant", extra={"restaurant_id": str(restaurant_id)})
        try:
            await restaurant_store.delete(restaurant_id)
        except Exception:
            logger.exception("Compensating delete failed, restaurant left without permissions", extra={"restaurant_id": str(restaurant_id)})
        raise UpstreamFailure("PERMISSION_BOOTSTRAP_FAILED")

    logger.info("Restaurant created", extra={"restaurant_id": str(restaurant_id), "slug": doc["slug"]})
    return OnboardingResult(restaurantId=str(restaurant_id), approvalStatus=doc["approval_status"])

async def get_restaurant(restaurant_id: str) -> dict:
    doc = await restaurant_store.find_by_id(restaurant_id)
    return restaurant_store.serialize_document(doc)

async def list_restaurants(approval_status: str | None = None, skip: int = 0, limit: int = 0) -> list[dict]:
    query = {}
    if approval_status:
        query["approval_status"] = approval_status
    docs = await restaurant_store.list_all(query, {"kyc_documents": 0, "password": 0}, skip=skip, limit=limit)
    return [restaurant_store.serialize_document(d) for d in docs]

async def update_restaurant(restaurant_id: str, payload: dict, images: list[str], uploader: DocumentUploader, actor_email: str = None) -> dict:
    doc = await restaurant_store.find_by_id(restaurant_id)
    update = _raise_if_failed(validate_restaurant_update(payload))

    for field in ("name", "phone", "email", "food_type", "merchant_search_name", "min_order_amount",
                  "payment_methods", "opening_hours", "is_active", "approval_status"):
        value = getattr(update, field)
        if value is not None:
            doc[field] = value
    if update.address is not None:
        address = doc.setdefault("address", {})
        for field in ("street", "city", "state", "zip"):
            value = getattr(update.address, field)
            if value:
                address[field] = value
        if update.address.location is not None:
            doc["location"] = update.address.location.model_dump()

    if images:
        image_urls = await upload_optional(uploader, images)
        if image_urls:
            doc["images"] = image_urls

    await restaurant_store.save(doc)
    logger.info("Restaurant updated", extra={"actor": actor_email, "restaurant_id": restaurant_id})
    return restaurant_store.serialize_document(doc)

async def delete_restaurant(restaurant_id: str, actor_email: str = None) -> None:
    """
    Delete the restaurant and then its permission record. A failure on the
    second step is reported, the restaurant is already gone at that point.
    """
    oid = restaurant_store.parse_object_id(restaurant_id)
    await restaurant_store.delete(oid)
    try:
        await delete_permission(oid)
    except PyMongoError:
        logger.exception("Restaurant deleted but its permissions were not", extra={"restaurant_id": restaurant_id})
        raise UpstreamFailure("PERMISSION_CLEANUP_FAILED", "Restaurant deleted but its permissions could not be removed")
    logger.info("Restaurant deleted", extra={"actor": actor_email, "restaurant_id": restaurant_id})

async def update_business_hours(restaurant_id: str, hours, actor_email: str = None) -> dict:
    oid = restaurant_store.parse_object_id(restaurant_id)
    normalized = _raise_if_failed(validate_business_hours(hours))
    doc = await restaurant_store.find_by_id(oid)
    doc["business_hours"] = {day: entry.model_dump() for day, entry in normalized.items()}
    await restaurant_store.save(doc)
    logger.info("Business hours updated", extra={"actor": actor_email, "restaurant_id": restaurant_id})
    return doc["business_hours"]

async def add_kyc(restaurant_id: str, files: list[str], uploader: DocumentUploader, actor_email: str = None) -> dict:
    doc = await restaurant_store.find_by_id(restaurant_id)
    urls = await upload_optional(uploader, files)
    kyc_documents = doc.get("kyc_documents") or {}
    kyc_documents["additional"] = list(kyc_documents.get("additional", [])) + urls
    doc["kyc_documents"] = kyc_documents
    doc["kyc_status"] = "pending"
    await restaurant_store.save(doc)
    logger.info("KYC documents added", extra={"actor": actor_email, "restaurant_id": restaurant_id, "count": len(urls)})
    return restaurant_store.serialize_document(doc)

async def get_kyc(restaurant_id: str) -> dict:
    doc = await restaurant_store.find_by_id(restaurant_id, {"kyc_documents": 1, "kyc_status": 1, "kyc": 1})
    return {
        "kyc": doc.get("kyc") or {},
        "kycDocuments": doc.get("kyc_documents") or {},
        "kycStatus": doc.get("kyc_status") or "not-submitted",
    }

async def add_service_area(restaurant_id: str, areas, actor_email: str = None) -> list[dict]:
    oid = restaurant_store.parse_object_id(restaurant_id)
    polygons = _raise_if_failed(validate_service_areas(areas))
    doc = await restaurant_store.find_by_id(oid)
    doc["service_areas"] = [p.model_dump() for p in polygons]
    await restaurant_store.save(doc)
    logger.info("Service areas replaced", extra={"actor": actor_email, "restaurant_id": restaurant_id, "count": len(polygons)})
    return doc["service_areas"]
