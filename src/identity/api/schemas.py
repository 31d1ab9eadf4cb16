"""Pydantic request schemas for the Identity API.

These are external contracts (anti-corruption layer). Fields are snake_case
in Python and camelCase on the wire.
"""

from typing import Literal

from pydantic import Field

from shared.schemas import CamelModel


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------
class SignupRequest(CamelModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=6)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    role: Literal["admin", "customer"] = "customer"

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "email": "mona@example.com",
                    "password": "s3cret-pass",
                    "firstName": "Mona",
                    "lastName": "Hassan",
                    "role": "customer",
                }
            ]
        }
    }


class LoginRequest(CamelModel):
    email: str
    password: str


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------
class AddressRequest(CamelModel):
    recipient_name: str = Field(min_length=1, max_length=255)
    street_address: str = Field(min_length=1, max_length=255)
    district: str = Field(min_length=1, max_length=100)
    postal_code: str = Field(pattern=r"^\d{5}$")
    city: str = Field(min_length=1, max_length=100)
    building_number: str | None = None
    secondary_number: str | None = None
    phone_number: str | None = None
    label: str | None = Field(default=None, max_length=50)
    is_default: bool | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "recipientName": "Mona Hassan",
                    "streetAddress": "12 Abbas El Akkad St",
                    "district": "Nasr City",
                    "postalCode": "11765",
                    "city": "Cairo",
                    "phoneNumber": "+201000000000",
                    "label": "Home",
                    "isDefault": True,
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Admin users
# ---------------------------------------------------------------------------
class CreateUserRequest(SignupRequest):
    pass


class UpdateUserRequest(CamelModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    role: Literal["admin", "customer"] | None = None
