"""
Pure validation for restaurant onboarding and the per-field update operations.

Nothing in here touches the database or raises for bad input: every check
returns either a normalized value or a ValidationFailure that the caller
turns into a 400 response.
"""
import json
import math
import re
from typing import Any, Optional
from pydantic import BaseModel, Field
from models.order import ORDER_STATUSES
from models.restaurant import (
    APPROVAL_STATUSES, FOOD_TYPES, PAYMENT_METHODS, REQUIRED_DOCUMENTS, REQUIRED_FIELDS, WEEKDAYS,
    Address, AddressUpdate, BusinessHoursEntry, GeoPoint, KycNumbers, RestaurantOnboarding,
    RestaurantUpdate, ServiceArea,
)

MIN_PASSWORD_LENGTH = 8
DEFAULT_PAYMENT_METHODS = ["online"]
DEFAULT_MIN_ORDER_AMOUNT = 100.0
TIME_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")

class ValidationFailure(BaseModel):
    code: str
    message: str
    fields: list[str] = Field(default_factory=list)

def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ""

def resolve_path(payload: dict, dotted: str) -> Any:
    value: Any = payload
    for part in dotted.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
        if value is None:
            return None
    return value

def collect_missing_fields(payload: dict, required=REQUIRED_FIELDS) -> list[str]:
    """Every required dotted path that is absent or empty, in declaration order."""
    return [path for path in required if _is_blank(resolve_path(payload, path))]

def check_required_fields(payload: dict) -> Optional[ValidationFailure]:
    missing = collect_missing_fields(payload)
    if missing:
        return ValidationFailure(
            code="REQUIRED_FIELD_MISSING",
            message=f"Missing required fields: {', '.join(missing)}",
            fields=missing,
        )
    return None

def check_password(password: str) -> Optional[ValidationFailure]:
    if len(str(password)) < MIN_PASSWORD_LENGTH:
        return ValidationFailure(
            code="WEAK_PASSWORD",
            message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
            fields=["password"],
        )
    return None

def parse_food_type(value: Any) -> str | ValidationFailure:
    food_type = str(value).strip()
    if food_type not in FOOD_TYPES:
        return ValidationFailure(
            code="INVALID_FOOD_TYPE",
            message=f"Invalid foodType. Allowed: {', '.join(FOOD_TYPES)}",
            fields=["foodType"],
        )
    return food_type

def parse_opening_hours(value: Any) -> list | ValidationFailure:
    failure = ValidationFailure(
        code="INVALID_OPENING_HOURS",
        message="Invalid openingHours. Expected a valid JSON array.",
        fields=["openingHours"],
    )
    if isinstance(value, list):
        return value
    if not isinstance(value, str):
        return failure
    try:
        parsed = json.loads(value)
    except ValueError:
        return failure
    if not isinstance(parsed, list):
        return failure
    return parsed

def check_documents(attached) -> Optional[ValidationFailure]:
    missing = [label for field, label in REQUIRED_DOCUMENTS.items() if field not in attached]
    if missing:
        return ValidationFailure(
            code="DOCUMENT_REQUIRED",
            message=f"Missing documents: {', '.join(missing)}",
            fields=[field for field in REQUIRED_DOCUMENTS if field not in attached],
        )
    return None

def parse_payment_methods(value: Any) -> list[str] | ValidationFailure:
    """
    Accepts "online,cod", ["online", "cod"] or nothing (defaults to online).
    Any entry outside the allowed set fails the whole value.
    """
    if value is None or (isinstance(value, (str, list)) and len(value) == 0):
        return list(DEFAULT_PAYMENT_METHODS)
    if isinstance(value, str):
        methods = [m.strip() for m in value.split(",")]
    elif isinstance(value, (list, tuple)):
        methods = [str(m).strip() for m in value]
    else:
        methods = [str(value).strip()]
    # a set of methods, first occurrence wins
    methods = list(dict.fromkeys(methods))
    invalid = [m for m in methods if m not in PAYMENT_METHODS]
    if invalid:
        return ValidationFailure(
            code="INVALID_PAYMENT_METHOD",
            message=f"Invalid payment methods: {', '.join(invalid)}. Allowed: {', '.join(PAYMENT_METHODS)}",
            fields=invalid,
        )
    return methods

def parse_min_order_amount(value: Any, default: float = DEFAULT_MIN_ORDER_AMOUNT) -> float | ValidationFailure:
    if _is_blank(value):
        return float(default)
    try:
        amount = float(value)
    except (TypeError, ValueError):
        amount = 0
    if not math.isfinite(amount) or amount <= 0:
        return ValidationFailure(
            code="INVALID_MIN_ORDER_AMOUNT",
            message="minOrderAmount must be a positive number",
            fields=["minOrderAmount"],
        )
    return amount

def _to_float(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0

def parse_location(address: dict) -> GeoPoint:
    # unparsable coordinates fall back to 0, matching the historical behaviour
    return GeoPoint(coordinates=[_to_float(address.get("longitude")), _to_float(address.get("latitude"))])

def validate_onboarding(payload: dict, attached_documents, default_min_order: float = DEFAULT_MIN_ORDER_AMOUNT) -> RestaurantOnboarding | ValidationFailure:
    """
    Runs the onboarding checks in pipeline order and stops at the first failure:
    required fields, password strength, food type, opening hours, documents,
    payment methods, minimum order amount.
    """
    failure = check_required_fields(payload)
    if failure:
        return failure
    failure = check_password(payload["password"])
    if failure:
        return failure
    food_type = parse_food_type(payload["foodType"])
    if isinstance(food_type, ValidationFailure):
        return food_type
    opening_hours = parse_opening_hours(payload["openingHours"])
    if isinstance(opening_hours, ValidationFailure):
        return opening_hours
    failure = check_documents(attached_documents)
    if failure:
        return failure
    payment_methods = parse_payment_methods(payload.get("paymentMethods"))
    if isinstance(payment_methods, ValidationFailure):
        return payment_methods
    min_order_amount = parse_min_order_amount(payload.get("minOrderAmount"), default_min_order)
    if isinstance(min_order_amount, ValidationFailure):
        return min_order_amount

    address = payload["address"]
    return RestaurantOnboarding(
        name=str(payload["name"]).strip(),
        owner_name=str(payload["ownerName"]).strip(),
        phone=str(payload["phone"]).strip(),
        email=str(payload["email"]).strip(),
        password=str(payload["password"]),
        address=Address(
            street=str(address["street"]).strip(),
            city=str(address["city"]).strip(),
            state=str(address["state"]).strip(),
            zip=str(address.get("pincode") or address.get("zip") or "").strip(),
        ),
        location=parse_location(address),
        kyc=KycNumbers(
            fssai_number=str(payload["fssaiNumber"]).strip(),
            gst_number=str(payload["gstNumber"]).strip(),
            aadhar_number=str(payload["aadharNumber"]).strip(),
        ),
        food_type=food_type,
        opening_hours=opening_hours,
        payment_methods=payment_methods,
        min_order_amount=min_order_amount,
    )

def validate_business_hours(hours: Any) -> dict[str, BusinessHoursEntry] | ValidationFailure:
    if not isinstance(hours, dict):
        return ValidationFailure(code="INVALID_BUSINESS_HOURS", message="businessHours must be a valid object.", fields=["businessHours"])
    normalized = {}
    for day, times in hours.items():
        if day not in WEEKDAYS:
            return ValidationFailure(code="INVALID_DAY", message=f"Invalid day: {day}", fields=[day])
        if not isinstance(times, dict):
            return ValidationFailure(code="INVALID_BUSINESS_HOURS", message=f"Business hours for {day} must be an object.", fields=[day])
        if times.get("closed") is True:
            normalized[day] = BusinessHoursEntry(closed=True)
            continue
        start, end = times.get("startTime"), times.get("endTime")
        if not start or not end:
            return ValidationFailure(code="MISSING_TIME", message=f"Missing startTime or endTime for {day}.", fields=[day])
        if not TIME_PATTERN.match(str(start)) or not TIME_PATTERN.match(str(end)):
            return ValidationFailure(code="INVALID_TIME_FORMAT", message=f"Invalid time format for {day}. Use HH:mm.", fields=[day])
        normalized[day] = BusinessHoursEntry(start_time=start, end_time=end, closed=False)
    return normalized

def validate_service_areas(areas: Any) -> list[ServiceArea] | ValidationFailure:
    if not isinstance(areas, list) or len(areas) == 0:
        return ValidationFailure(
            code="INVALID_SERVICE_AREAS",
            message="serviceAreas must be a non-empty array of GeoJSON Polygons",
            fields=["serviceAreas"],
        )
    polygons = []
    for area in areas:
        if (
            not isinstance(area, dict)
            or area.get("type") != "Polygon"
            or not isinstance(area.get("coordinates"), list)
            or len(area["coordinates"]) == 0
        ):
            return ValidationFailure(
                code="INVALID_POLYGON",
                message="Each serviceArea must be a valid GeoJSON Polygon with coordinates",
                fields=["serviceAreas"],
            )
        polygons.append(ServiceArea(coordinates=area["coordinates"]))
    return polygons

def _parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    return None

def validate_restaurant_update(payload: dict) -> RestaurantUpdate | ValidationFailure:
    """Partial update: only the fields present are validated and returned."""
    update = RestaurantUpdate()
    for key, attr in (("name", "name"), ("phone", "phone"), ("email", "email"), ("merchantSearchName", "merchant_search_name")):
        if not _is_blank(payload.get(key)):
            setattr(update, attr, str(payload[key]).strip())

    if not _is_blank(payload.get("foodType")):
        food_type = parse_food_type(payload["foodType"])
        if isinstance(food_type, ValidationFailure):
            return food_type
        update.food_type = food_type
    if payload.get("paymentMethods"):
        methods = parse_payment_methods(payload["paymentMethods"])
        if isinstance(methods, ValidationFailure):
            return methods
        update.payment_methods = methods
    if payload.get("openingHours"):
        opening_hours = parse_opening_hours(payload["openingHours"])
        if isinstance(opening_hours, ValidationFailure):
            return opening_hours
        update.opening_hours = opening_hours
    if not _is_blank(payload.get("minOrderAmount")):
        amount = parse_min_order_amount(payload["minOrderAmount"])
        if isinstance(amount, ValidationFailure):
            return amount
        update.min_order_amount = amount
    if payload.get("isActive") is not None:
        is_active = _parse_bool(payload["isActive"])
        if is_active is None:
            return ValidationFailure(code="INVALID_IS_ACTIVE", message="isActive must be a boolean", fields=["isActive"])
        update.is_active = is_active
    if not _is_blank(payload.get("status")):
        status = str(payload["status"]).strip()
        if status not in APPROVAL_STATUSES:
            return ValidationFailure(
                code="INVALID_STATUS",
                message=f"Invalid status. Allowed: {', '.join(APPROVAL_STATUSES)}",
                fields=["status"],
            )
        update.approval_status = status

    address = payload.get("address")
    if isinstance(address, dict) and address:
        address_update = AddressUpdate(
            street=address.get("street") or None,
            city=address.get("city") or None,
            state=address.get("state") or None,
            zip=address.get("pincode") or address.get("zip") or None,
        )
        if not _is_blank(address.get("longitude")) and not _is_blank(address.get("latitude")):
            address_update.location = parse_location(address)
        elif isinstance(address.get("coordinates"), (list, tuple)) and len(address["coordinates"]) == 2:
            # clients send [lat, lng], GeoJSON stores [lng, lat]
            lat, lng = address["coordinates"]
            address_update.location = GeoPoint(coordinates=[_to_float(lng), _to_float(lat)])
        update.address = address_update
    return update

def validate_order_status(status: Any) -> str | ValidationFailure:
    if _is_blank(status):
        return ValidationFailure(code="STATUS_REQUIRED", message="Missing status", fields=["status"])
    status = str(status).strip()
    if status not in ORDER_STATUSES:
        return ValidationFailure(
            code="INVALID_ORDER_STATUS",
            message=f"Invalid order status. Allowed: {', '.join(ORDER_STATUSES)}",
            fields=["status"],
        )
    return status
