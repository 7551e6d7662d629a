"""
Customer API — Customer Request/Response Schemas
=================================================

What:  Pydantic models defining the customer API contract.
How:   FastAPI uses these models to validate request bodies, serialize
       responses, and generate the OpenAPI documentation. ResourceRepository
       uses the same models to validate payloads before touching the store.

Field rules:
    Create: `name` is required; every other field is optional or defaulted.
    Update: every field is optional; only the fields sent are written.
            `name` and `loyalty_points` may be omitted but never set to null.
    Both:   unknown fields are ignored, not rejected.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, StrictInt, StrictStr, ValidationInfo, field_validator

from customer_api import identifiers
from customer_api.models.customer import MAX_LOYALTY_POINTS


def require_date_or_string(v: Any) -> Any:
    """Numbers are not dates; lax mode would read them as Unix timestamps."""
    if v is None or isinstance(v, (date, str)):
        return v
    raise ValueError("Input should be an ISO 8601 date string")


# ══════════════════════════════════════════════════════════════════════════
# Request Models — What clients send
# ══════════════════════════════════════════════════════════════════════════


class CustomerCreate(BaseModel):
    """Full payload for POST /api/customers."""

    name: StrictStr = Field(min_length=1, max_length=255, description="Customer display name")
    email: Optional[StrictStr] = Field(default=None, max_length=320, description="Contact e-mail address")
    description: Optional[StrictStr] = Field(default=None, description="Free-form notes about the customer")
    loyalty_points: StrictInt = Field(default=0, ge=0, le=MAX_LOYALTY_POINTS, description="Accumulated loyalty points")
    birth_date: Optional[date] = Field(default=None, description="Date of birth (ISO 8601 date)")

    model_config = {
        "extra": "ignore",
        "json_schema_extra": {
            "examples": [{"name": "Ada Lovelace", "email": "ada@example.com", "loyalty_points": 10}]
        },
    }

    @field_validator("birth_date", mode="before")
    @classmethod
    def birth_date_not_number(cls, v: Any) -> Any:
        return require_date_or_string(v)


class CustomerUpdate(BaseModel):
    """
    Partial payload for PUT/PATCH /api/customers/{id}.

    Absent fields stay untouched on the stored customer; callers read the
    supplied subset with `model_dump(exclude_unset=True)`.
    """

    name: Optional[StrictStr] = Field(default=None, min_length=1, max_length=255, description="Customer display name")
    email: Optional[StrictStr] = Field(default=None, max_length=320, description="Contact e-mail address")
    description: Optional[StrictStr] = Field(default=None, description="Free-form notes about the customer")
    loyalty_points: Optional[StrictInt] = Field(default=None, ge=0, le=MAX_LOYALTY_POINTS, description="Accumulated loyalty points")
    birth_date: Optional[date] = Field(default=None, description="Date of birth (ISO 8601 date)")

    model_config = {
        "extra": "ignore",
        "json_schema_extra": {"examples": [{"loyalty_points": 25}]},
    }

    @field_validator("birth_date", mode="before")
    @classmethod
    def birth_date_not_number(cls, v: Any) -> Any:
        return require_date_or_string(v)

    @field_validator("name", "loyalty_points")
    @classmethod
    def reject_null(cls, v: Any, info: ValidationInfo) -> Any:
        """Only runs for supplied values; omitting the field is fine."""
        if v is None:
            raise ValueError(f"{info.field_name} may be omitted but not set to null")
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns
# ══════════════════════════════════════════════════════════════════════════


class CustomerResponse(BaseModel):
    """Full representation of a stored customer."""

    id: str = Field(description="External identifier (canonical lowercase UUID)")
    name: str = Field(description="Customer display name")
    email: Optional[str] = Field(default=None, description="Contact e-mail address")
    description: Optional[str] = Field(default=None, description="Free-form notes about the customer")
    loyalty_points: int = Field(description="Accumulated loyalty points")
    birth_date: Optional[date] = Field(default=None, description="Date of birth")
    created_at: datetime = Field(description="When the customer was created (UTC ISO 8601)")
    updated_at: Optional[datetime] = Field(default=None, description="When the customer was last updated")

    model_config = {"from_attributes": True}

    @field_validator("id", mode="before")
    @classmethod
    def encode_id(cls, v: Any) -> Any:
        if isinstance(v, uuid.UUID):
            return identifiers.encode(v)
        return v

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        # SQLite hands back naive datetimes; stored values are always UTC
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v
