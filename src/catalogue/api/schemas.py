"""Pydantic request schemas for the Catalogue API.

Products, bundles and categories are created from multipart forms (they
carry an image) and are forwarded as-is; only the JSON bodies are modelled
here.
"""

from pydantic import Field

from shared.schemas import CamelModel


class RestockRequest(CamelModel):
    quantity: int = Field(ge=1)

    model_config = {"json_schema_extra": {"examples": [{"quantity": 25}]}}


class ManufacturerRequest(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    logo_url: str | None = None


class ProductTypeRequest(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    allowed_attributes: list[str] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "SSD",
                    "allowedAttributes": ["capacity", "interface", "read_speed", "write_speed"],
                }
            ]
        }
    }
