"""Request bodies."""
from __future__ import annotations
import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .helpers import is_valid_email, is_valid_phone, normalize_email
from .settings import PACKAGE_NAMES


def _trimmed_length(value: str, lo: int, hi: int, message: str) -> str:
    value = value.strip()
    if not lo <= len(value) <= hi:
        raise ValueError(message)
    return value


class _CustomerFields(BaseModel):
    name: str
    email: str
    phone: str

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _trimmed_length(
            v, 2, 100, "Name must be between 2 and 100 characters"
        )

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        if not is_valid_email(v):
            raise ValueError("Invalid email format")
        return normalize_email(v)

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        if not is_valid_phone(v):
            raise ValueError("Invalid phone number format")
        return v


class OrderIn(_CustomerFields):
    package: str
    price: Decimal

    @field_validator("package")
    @classmethod
    def _package(cls, v: str) -> str:
        if v not in PACKAGE_NAMES:
            raise ValueError("Invalid package selection")
        return v

    @field_validator("price")
    @classmethod
    def _price(cls, v: Decimal) -> Decimal:
        if not v.is_finite() or v < Decimal("0.01"):
            raise ValueError("Invalid price")
        return v

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Jane Doe",
                "email": "jane@example.com",
                "phone": "+919999999999",
                "package": "Professional",
                "price": 299,
            }
        }
    }


class ContactIn(_CustomerFields):
    message: str

    @field_validator("message")
    @classmethod
    def _message(cls, v: str) -> str:
        return _trimmed_length(
            v, 10, 1000, "Message must be between 10 and 1000 characters"
        )


class VerifyPaymentIn(BaseModel):
    # not validated; a missing field fails the signature check
    orderId: Optional[Union[int, str]] = None
    paymentId: Optional[str] = None
    signature: Optional[str] = None


class LoginIn(BaseModel):
    email: str
    password: str


# ----------------------------
# Admin content
# ----------------------------
class EventIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    date: datetime.date
    time: datetime.time
    location: Optional[str] = None
    price: Decimal = Field(..., ge=0)


class SiteContentIn(BaseModel):
    title: Optional[str] = None
    subtitle: Optional[str] = None
    description: Optional[str] = None
    # free-form; stored and returned as-is
    content_data: Any = None


class PackageIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    features: Any = None
    package_type: str = Field(..., min_length=1, max_length=50)


class SpeakerIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    title: Optional[str] = None
    company: Optional[str] = None
    bio: Optional[str] = None
    image_url: Optional[str] = None


class DisplayOrderIn(BaseModel):
    display_order: int


class ContactInfoIn(BaseModel):
    phone_numbers: List[str] = Field(default_factory=list)
    email: Optional[str] = None
    location: Dict[str, Any] = Field(default_factory=dict)
