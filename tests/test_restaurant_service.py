"""Tests for the onboarding orchestrator and the per-restaurant operations."""
from __future__ import annotations

import pytest
from bson import ObjectId
from pymongo.errors import PyMongoError

from core.exceptions import InvalidIdentifier, RequestValidationFailed, ResourceNotFound, UpstreamFailure
from services import restaurant_service
from services.permission_service import get_permission
from services.restaurant_service import (
    add_kyc,
    add_service_area,
    create_restaurant,
    delete_restaurant,
    get_kyc,
    get_restaurant,
    list_restaurants,
    make_slug,
    slugify,
    update_business_hours,
    update_restaurant,
)
from utils.hash import verify_password


class TestCreateRestaurant:
    async def test_creates_restaurant_and_default_permissions(self, mock_db, onboarding_payload, staged_documents, uploader):
        result = await create_restaurant(onboarding_payload, staged_documents, [], uploader)

        assert result.approvalStatus == "pending"
        doc = await mock_db["restaurants"].find_one({"_id": ObjectId(result.restaurantId)})
        assert doc["name"] == "Spice Route"
        assert doc["kyc_status"] == "pending"
        assert doc["location"] == {"type": "Point", "coordinates": [77.5946, 12.9716]}
        assert doc["payment_methods"] == ["online", "cod"]
        assert doc["kyc_documents"]["fssai_doc_url"].startswith("https://cdn.test/")
        assert doc["slug"].startswith("spice-route-bengaluru-")

        permissions = await mock_db["restaurant_permissions"].find({"restaurant_id": doc["_id"]}).to_list(length=None)
        assert len(permissions) == 1
        assert permissions[0]["permissions"] == {
            "can_manage_menu": True,
            "can_accept_order": False,
            "can_reject_order": False,
            "can_manage_offers": False,
            "can_view_reports": True,
        }

        permission = await get_permission(doc["_id"])
        assert permission.restaurant_id == result.restaurantId
        assert permission.permissions.can_manage_menu is True
        assert permission.permissions.can_accept_order is False

    async def test_password_is_hashed(self, mock_db, onboarding_payload, staged_documents, uploader):
        result = await create_restaurant(onboarding_payload, staged_documents, [], uploader)

        doc = await mock_db["restaurants"].find_one({"_id": ObjectId(result.restaurantId)})
        assert doc["password"] != "s3cretpass"
        assert verify_password("s3cretpass", doc["password"])

    async def test_validation_failure_uploads_nothing(self, mock_db, onboarding_payload, staged_documents, uploader):
        onboarding_payload["foodType"] = "vegan"

        with pytest.raises(RequestValidationFailed) as exc_info:
            await create_restaurant(onboarding_payload, staged_documents, [], uploader)

        assert exc_info.value.code == "INVALID_FOOD_TYPE"
        assert uploader.uploaded == []
        assert await mock_db["restaurants"].count_documents({}) == 0

    async def test_missing_document_rejected_before_upload(self, mock_db, onboarding_payload, staged_documents, uploader):
        del staged_documents["aadharDoc"]

        with pytest.raises(RequestValidationFailed) as exc_info:
            await create_restaurant(onboarding_payload, staged_documents, [], uploader)

        assert exc_info.value.code == "DOCUMENT_REQUIRED"
        assert uploader.uploaded == []
        assert await mock_db["restaurants"].count_documents({}) == 0

    async def test_failed_document_upload_creates_nothing(self, mock_db, onboarding_payload, staged_documents, uploader):
        uploader.fail_on.add("gstDoc")

        with pytest.raises(UpstreamFailure) as exc_info:
            await create_restaurant(onboarding_payload, staged_documents, [], uploader)

        assert exc_info.value.status_code == 500
        assert exc_info.value.code == "DOCUMENT_UPLOAD_FAILED"
        assert await mock_db["restaurants"].count_documents({}) == 0
        assert await mock_db["restaurant_permissions"].count_documents({}) == 0

    async def test_failed_images_are_dropped(self, mock_db, onboarding_payload, staged_documents, uploader, tmp_path):
        good = tmp_path / "front.jpg"
        bad = tmp_path / "broken.jpg"
        good.write_bytes(b"jpg")
        bad.write_bytes(b"jpg")
        uploader.fail_on.add("broken")

        result = await create_restaurant(onboarding_payload, staged_documents, [str(good), str(bad)], uploader)

        doc = await mock_db["restaurants"].find_one({"_id": ObjectId(result.restaurantId)})
        assert len(doc["images"]) == 1

    async def test_permission_failure_removes_restaurant(self, mock_db, onboarding_payload, staged_documents, uploader, monkeypatch):
        async def broken_permission(restaurant_id):
            raise PyMongoError("permissions collection unavailable")

        monkeypatch.setattr(restaurant_service, "create_default_permission", broken_permission)

        with pytest.raises(UpstreamFailure) as exc_info:
            await create_restaurant(onboarding_payload, staged_documents, [], uploader)

        assert exc_info.value.code == "PERMISSION_BOOTSTRAP_FAILED"
        assert await mock_db["restaurants"].count_documents({}) == 0


class TestSlug:
    def test_slugify_collapses_symbols(self):
        assert slugify("Joe's  Pizza & Grill!") == "joe-s-pizza-grill"

    def test_slug_has_city_and_random_suffix(self):
        slug = make_slug("Spice Route", "New Delhi")

        prefix, suffix = slug.rsplit("-", 1)
        assert prefix == "spice-route-new-delhi"
        assert len(suffix) == 4
        assert suffix.isalnum() and suffix == suffix.lower()


class TestReadOperations:
    async def test_get_restaurant_hides_password(self, restaurant_id):
        restaurant = await get_restaurant(restaurant_id)

        assert restaurant["id"] == restaurant_id
        assert "password" not in restaurant

    async def test_malformed_id_is_distinct_from_not_found(self):
        with pytest.raises(InvalidIdentifier):
            await get_restaurant("not-an-id")
        with pytest.raises(ResourceNotFound):
            await get_restaurant(str(ObjectId()))

    async def test_list_excludes_kyc_documents(self, restaurant_id):
        restaurants = await list_restaurants()

        assert len(restaurants) == 1
        assert "kyc_documents" not in restaurants[0]
        assert "password" not in restaurants[0]

    async def test_list_filters_by_approval_status(self, restaurant_id):
        assert await list_restaurants(approval_status="pending") == []
        assert len(await list_restaurants(approval_status="approved")) == 1


class TestUpdateRestaurant:
    async def test_partial_update(self, mock_db, restaurant_id, uploader):
        restaurant = await update_restaurant(
            restaurant_id,
            {"name": "Masala House Express", "paymentMethods": "cod,wallet", "address": {"city": "Pimpri"}},
            [],
            uploader,
        )

        assert restaurant["name"] == "Masala House Express"
        assert restaurant["payment_methods"] == ["cod", "wallet"]
        assert restaurant["address"]["city"] == "Pimpri"
        assert restaurant["address"]["street"] == "1 FC Road"

    async def test_invalid_food_type_not_applied(self, mock_db, restaurant_id, uploader):
        with pytest.raises(RequestValidationFailed):
            await update_restaurant(restaurant_id, {"name": "X", "foodType": "vegan"}, [], uploader)

        doc = await mock_db["restaurants"].find_one({"_id": ObjectId(restaurant_id)})
        assert doc["name"] == "Masala House"

    async def test_images_replaced_when_upload_succeeds(self, restaurant_id, uploader, tmp_path):
        image = tmp_path / "new.jpg"
        image.write_bytes(b"jpg")

        restaurant = await update_restaurant(restaurant_id, {}, [str(image)], uploader)

        assert restaurant["images"] == ["https://cdn.test/docs/1"]


class TestDeleteRestaurant:
    async def test_removes_restaurant_and_permissions(self, mock_db, restaurant_id):
        await delete_restaurant(restaurant_id)

        assert await mock_db["restaurants"].count_documents({}) == 0
        assert await mock_db["restaurant_permissions"].count_documents({}) == 0

    async def test_unknown_id_touches_nothing(self, mock_db, restaurant_id):
        with pytest.raises(ResourceNotFound):
            await delete_restaurant(str(ObjectId()))
        with pytest.raises(InvalidIdentifier):
            await delete_restaurant("12345")

        assert await mock_db["restaurants"].count_documents({}) == 1
        assert await mock_db["restaurant_permissions"].count_documents({}) == 1


class TestBusinessHoursAndServiceAreas:
    async def test_closed_day_saved(self, mock_db, restaurant_id):
        hours = await update_business_hours(restaurant_id, {"monday": {"closed": True}})

        assert hours["monday"]["closed"] is True
        doc = await mock_db["restaurants"].find_one({"_id": ObjectId(restaurant_id)})
        assert doc["business_hours"]["monday"]["closed"] is True

    async def test_bad_time_rejected(self, restaurant_id):
        with pytest.raises(RequestValidationFailed) as exc_info:
            await update_business_hours(restaurant_id, {"monday": {"startTime": "25:00", "endTime": "10:00"}})

        assert exc_info.value.code == "INVALID_TIME_FORMAT"

    async def test_service_areas_replace_previous_list(self, mock_db, restaurant_id):
        first = {"type": "Polygon", "coordinates": [[[73.8, 18.5], [73.9, 18.5], [73.9, 18.6], [73.8, 18.5]]]}
        second = {"type": "Polygon", "coordinates": [[[73.7, 18.4], [73.8, 18.4], [73.8, 18.5], [73.7, 18.4]]]}
        await add_service_area(restaurant_id, [first])

        areas = await add_service_area(restaurant_id, [second, first])

        assert areas == [second, first]
        doc = await mock_db["restaurants"].find_one({"_id": ObjectId(restaurant_id)})
        assert doc["service_areas"] == [second, first]

    async def test_polygon_without_coordinates_rejected(self, restaurant_id):
        with pytest.raises(RequestValidationFailed) as exc_info:
            await add_service_area(restaurant_id, [{"type": "Polygon"}])

        assert exc_info.value.code == "INVALID_POLYGON"


class TestKyc:
    async def test_add_kyc_appends_and_sets_pending(self, restaurant_id, uploader, tmp_path):
        doc_path = tmp_path / "licence.pdf"
        doc_path.write_bytes(b"pdf")

        await add_kyc(restaurant_id, [str(doc_path)], uploader)
        await add_kyc(restaurant_id, [str(doc_path)], uploader)
        kyc = await get_kyc(restaurant_id)

        assert kyc["kycStatus"] == "pending"
        assert kyc["kycDocuments"]["additional"] == ["https://cdn.test/docs/1", "https://cdn.test/docs/2"]
        assert kyc["kycDocuments"]["fssai_doc_url"] == "https://cdn.test/f"

    async def test_failed_kyc_upload_is_skipped(self, restaurant_id, uploader, tmp_path):
        doc_path = tmp_path / "licence.pdf"
        doc_path.write_bytes(b"pdf")
        uploader.fail_all = True

        await add_kyc(restaurant_id, [str(doc_path)], uploader)
        kyc = await get_kyc(restaurant_id)

        assert kyc["kycDocuments"]["additional"] == []
        assert kyc["kycStatus"] == "pending"

    async def test_kyc_status_defaults_to_not_submitted(self, mock_db):
        result = await mock_db["restaurants"].insert_one({"name": "Bare"})

        kyc = await get_kyc(str(result.inserted_id))

        assert kyc["kycStatus"] == "not-submitted"
        assert kyc["kycDocuments"] == {}
