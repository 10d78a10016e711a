# models/restaurant.py
from pydantic import BaseModel, Field
from typing import Any, List, Literal, Optional

FOOD_TYPES = ("veg", "non-veg", "both")
PAYMENT_METHODS = ("online", "cod", "wallet")
APPROVAL_STATUSES = ("pending", "approved", "rejected")
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

# multipart field name -> human name used in error messages
REQUIRED_DOCUMENTS = {
    "fssaiDoc": "FSSAI License",
    "gstDoc": "GST Certificate",
    "aadharDoc": "Aadhar Card",
}

REQUIRED_FIELDS = (
    "name", "ownerName", "phone", "email",
    "password",
    "fssaiNumber", "gstNumber", "aadharNumber",
    "address.street", "address.city", "address.state",
    "foodType", "openingHours",
)

class GeoPoint(BaseModel):
    type: Literal["Point"] = "Point"
    # [longitude, latitude]
    coordinates: List[float] = Field(default_factory=lambda: [0.0, 0.0])

class Address(BaseModel):
    street: str
    city: str
    state: str
    zip: str = ""

class KycNumbers(BaseModel):
    fssai_number: str
    gst_number: str
    aadhar_number: str

class RestaurantOnboarding(BaseModel):
    """Normalized onboarding request, produced once by the validation layer."""
    name: str
    owner_name: str
    phone: str
    email: str
    password: str
    address: Address
    location: GeoPoint
    kyc: KycNumbers
    food_type: Literal["veg", "non-veg", "both"]
    opening_hours: List[Any]
    payment_methods: List[str]
    min_order_amount: float

class BusinessHoursEntry(BaseModel):
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    closed: bool = False

class ServiceArea(BaseModel):
    type: Literal["Polygon"] = "Polygon"
    coordinates: List[Any]

class AddressUpdate(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    location: Optional[GeoPoint] = None

class RestaurantUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    food_type: Optional[str] = None
    merchant_search_name: Optional[str] = None
    min_order_amount: Optional[float] = None
    payment_methods: Optional[List[str]] = None
    opening_hours: Optional[List[Any]] = None
    is_active: Optional[bool] = None
    approval_status: Optional[str] = None
    address: Optional[AddressUpdate] = None

class OnboardingResult(BaseModel):
    restaurantId: str
    approvalStatus: str
