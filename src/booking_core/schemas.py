"""Pydantic schemas for tool argument validation and response records.

Each entity has four argument schemas (insert, update, delete, filter) and one
response schema. Argument schemas reject unknown fields and are strict about
numbers so that ``"7"`` or ``7.5`` never pass as an identifier.
"""
from datetime import datetime
from typing import Annotated, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, Field


def _check_email(value: str) -> str:
    """Reject malformed addresses but keep the caller's spelling.

    Filters match emails exactly, so the stored value must be the one sent.
    """
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(f"value is not a valid email address: {e}") from e
    return value


EmailAddress = Annotated[str, AfterValidator(_check_email)]


class ArgumentsModel(BaseModel):
    """Base for tool argument schemas."""

    model_config = ConfigDict(extra="forbid", strict=True)


# ============================================================================
# Organization Schemas
# ============================================================================

class OrganizationCreate(ArgumentsModel):
    """Schema for creating an organization."""

    name: str = Field(..., min_length=1, max_length=255)
    code: Optional[int] = Field(None, gt=0, description="External organization code (defaults to the new id)")
    description: Optional[str] = None
    email: Optional[EmailAddress] = None
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None


class OrganizationUpdate(ArgumentsModel):
    """Schema for updating an organization. Every field but ``id`` is optional."""

    id: int = Field(..., gt=0)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    email: Optional[EmailAddress] = None
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None


class OrganizationDelete(ArgumentsModel):
    """Schema for deleting an organization."""

    id: int = Field(..., gt=0)


class OrganizationFilter(ArgumentsModel):
    """Filters for listing organizations (all optional)."""

    name: Optional[str] = Field(None, description="Case-insensitive partial match")
    email: Optional[str] = Field(None, description="Exact match")


class OrganizationResponse(BaseModel):
    """Organization record as returned to callers."""

    id: int
    code: Optional[int] = None
    name: str
    description: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Staff Schemas
# ============================================================================

class StaffCreate(ArgumentsModel):
    """Schema for creating a staff member.

    ``email`` is required here; the create handler fills it in beforehand when
    contact synthesis is enabled.
    """

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailAddress
    phone: Optional[str] = Field(None, max_length=20)
    organization_code: int = Field(..., gt=0)


class StaffUpdate(ArgumentsModel):
    """Schema for updating a staff member."""

    id: int = Field(..., gt=0)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailAddress] = None
    phone: Optional[str] = Field(None, max_length=20)
    organization_code: Optional[int] = Field(None, gt=0)


class StaffDelete(ArgumentsModel):
    """Schema for deleting a staff member."""

    id: int = Field(..., gt=0)


class StaffFilter(ArgumentsModel):
    """Filters for listing staff. The organization scope is mandatory."""

    organization_code: int = Field(..., gt=0)
    name: Optional[str] = Field(None, description="Case-insensitive partial match")
    email: Optional[str] = Field(None, description="Exact match")


class StaffResponse(BaseModel):
    """Staff record as returned to callers."""

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    organization_id: int
    organization_code: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Offering Schemas
# ============================================================================

class OfferingCreate(ArgumentsModel):
    """Schema for creating an offering. ``requester_token`` is never persisted."""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: float = Field(..., gt=0)
    duration: int = Field(..., gt=0, description="Duration in minutes")
    category: Optional[str] = Field(None, max_length=100)
    organization_code: int = Field(..., gt=0)
    requester_token: str = Field(..., min_length=1)


class OfferingUpdate(ArgumentsModel):
    """Schema for updating an offering."""

    id: int = Field(..., gt=0)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    duration: Optional[int] = Field(None, gt=0)
    category: Optional[str] = Field(None, max_length=100)
    organization_code: Optional[int] = Field(None, gt=0)
    requester_token: str = Field(..., min_length=1)


class OfferingDelete(ArgumentsModel):
    """Schema for deleting an offering."""

    id: int = Field(..., gt=0)
    requester_token: str = Field(..., min_length=1)


class OfferingFilter(ArgumentsModel):
    """Filters for listing offerings. The organization scope is mandatory."""

    organization_code: int = Field(..., gt=0)
    category: Optional[str] = None
    price_min: Optional[float] = Field(None, gt=0)
    price_max: Optional[float] = Field(None, gt=0)


class OfferingResponse(BaseModel):
    """Offering record as returned to callers."""

    id: int
    name: str
    description: Optional[str] = None
    price: float
    duration: int
    category: Optional[str] = None
    organization_id: int
    organization_code: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
