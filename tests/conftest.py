"""
Pytest configuration and fixtures.

Every test gets a fresh in-memory Mongo database bound to the shared
connection, an in-memory document uploader, and (for HTTP tests) an
httpx client talking to the ASGI app directly.
"""
from __future__ import annotations

import json
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from core.dependencies import CurrentUser, get_current_user
from db.db_operation import mongo_conn
from main import app
from services.upload_service import DocumentUploader, UploadError, get_uploader


class InMemoryUploader(DocumentUploader):
    """Records uploads and returns fake CDN URLs; paths listed in fail_on raise."""

    def __init__(self):
        self.uploaded: list[str] = []
        self.fail_on: set[str] = set()
        self.fail_all = False

    async def upload(self, local_path: str) -> str:
        if self.fail_all or any(marker in local_path for marker in self.fail_on):
            raise UploadError(f"refused {local_path}")
        self.uploaded.append(local_path)
        return f"https://cdn.test/docs/{len(self.uploaded)}"


@pytest.fixture(autouse=True)
def mock_db():
    """Bind a fresh in-memory database for each test."""
    original = mongo_conn.db
    database = AsyncMongoMockClient()["test_food_delivery"]
    mongo_conn.bind(database)
    yield database
    mongo_conn.bind(original)


@pytest.fixture
def uploader() -> InMemoryUploader:
    return InMemoryUploader()


@pytest.fixture
def superadmin() -> CurrentUser:
    return CurrentUser(id=str(ObjectId()), email="root@foodapp.test", role="superadmin")


@pytest_asyncio.fixture
async def client(uploader, superadmin) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_uploader] = lambda: uploader
    app.dependency_overrides[get_current_user] = lambda: superadmin
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def onboarding_payload() -> dict:
    """A complete onboarding form for "Spice Route" in Bengaluru."""
    return {
        "name": "Spice Route",
        "ownerName": "Asha Rao",
        "phone": "9876543210",
        "email": "owner@spiceroute.test",
        "password": "s3cretpass",
        "fssaiNumber": "FSSAI-12345",
        "gstNumber": "29ABCDE1234F1Z5",
        "aadharNumber": "1234-5678-9012",
        "address": {
            "street": "12 MG Road",
            "city": "Bengaluru",
            "state": "Karnataka",
            "pincode": "560001",
            "longitude": "77.5946",
            "latitude": "12.9716",
        },
        "foodType": "veg",
        "openingHours": json.dumps([{"day": "monday", "open": "09:00", "close": "22:00"}]),
        "paymentMethods": "online,cod",
    }


@pytest.fixture
def staged_documents(tmp_path) -> dict[str, str]:
    paths = {}
    for name in ("fssaiDoc", "gstDoc", "aadharDoc"):
        path = tmp_path / f"{name}.pdf"
        path.write_bytes(b"%PDF-1.4 test")
        paths[name] = str(path)
    return paths


@pytest.fixture
def onboarding_form(onboarding_payload) -> dict:
    """The onboarding payload flattened into bracketed multipart keys."""
    form = {}
    for key, value in onboarding_payload.items():
        if isinstance(value, dict):
            for sub, sub_value in value.items():
                form[f"{key}[{sub}]"] = sub_value
        else:
            form[key] = value
    return form


@pytest.fixture
def document_files() -> list[tuple[str, tuple[str, bytes, str]]]:
    return [
        ("fssaiDoc", ("fssai.pdf", b"%PDF-1.4 fssai", "application/pdf")),
        ("gstDoc", ("gst.pdf", b"%PDF-1.4 gst", "application/pdf")),
        ("aadharDoc", ("aadhar.jpg", b"\xff\xd8\xff aadhar", "image/jpeg")),
    ]


@pytest_asyncio.fixture
async def restaurant_id(mock_db) -> str:
    """An approved restaurant already stored in the database."""
    result = await mock_db["restaurants"].insert_one({
        "name": "Masala House",
        "slug": "masala-house-pune-ab12",
        "password": "$2b$12$hash",
        "address": {"street": "1 FC Road", "city": "Pune", "state": "Maharashtra", "zip": "411004"},
        "location": {"type": "Point", "coordinates": [73.8567, 18.5204]},
        "food_type": "both",
        "payment_methods": ["online"],
        "kyc": {"fssai_number": "F1", "gst_number": "G1", "aadhar_number": "A1"},
        "kyc_documents": {
            "fssai_doc_url": "https://cdn.test/f",
            "gst_doc_url": "https://cdn.test/g",
            "aadhar_doc_url": "https://cdn.test/a",
            "additional": [],
        },
        "kyc_status": "approved",
        "approval_status": "approved",
        "is_active": True,
        "business_hours": {},
        "service_areas": [],
        "images": [],
    })
    await mock_db["restaurant_permissions"].insert_one({
        "restaurant_id": result.inserted_id,
        "permissions": {"can_manage_menu": True, "can_view_reports": True},
    })
    return str(result.inserted_id)
