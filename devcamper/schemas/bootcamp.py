"""
DevCamper Backend — Bootcamp Request/Response Schemas
======================================================

What:  Pydantic models defining the bootcamp API contract.
How:   FastAPI validates request bodies against BootcampCreate/BootcampUpdate
       and serializes responses through the envelope models below.

Design Decision:
    Schemas are separate from SQLAlchemy models:
    1. The request body never carries an owner; the owner is always the
       authenticated user, so a client cannot create records for someone else
    2. `address` is input only; it is geocoded into the location columns
    3. The response exposes location as a point with [longitude, latitude]
"""

import uuid
from datetime import datetime
from typing import Any, ClassVar, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, EmailStr, Field, model_validator

from devcamper.models.bootcamp import DEFAULT_PHOTO, Bootcamp

Career = Literal[
    "Web Development",
    "Mobile Development",
    "UI/UX",
    "Data Science",
    "Business",
    "Other",
]

WEBSITE_PATTERN = r"^https?://[^\s/$.?#].[^\s]*$"


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class BootcampCreate(BaseModel):
    """
    Body of POST /bootcamps.

    Unknown keys (including any `user` field) are ignored.
    """

    name: str = Field(min_length=1, max_length=50, description="Unique bootcamp name")
    description: str = Field(min_length=1, max_length=500)
    website: Optional[str] = Field(default=None, pattern=WEBSITE_PATTERN)
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[EmailStr] = None
    address: str = Field(min_length=1, description="Street address, geocoded into location")
    careers: List[Career] = Field(min_length=1)
    average_rating: Optional[float] = Field(default=None, ge=1, le=10)
    average_cost: Optional[float] = Field(default=None, ge=0)
    housing: bool = False
    job_assistance: bool = False
    job_guarantee: bool = False
    accept_gi: bool = False

    model_config = {"str_strip_whitespace": True, "extra": "ignore"}


class BootcampUpdate(BaseModel):
    """
    Body of PUT /bootcamps/{id}: a partial update.

    Only the keys the client sent are applied (model_dump(exclude_unset=True)),
    and they pass the same field validation as on creation.
    """

    NON_NULLABLE: ClassVar[Tuple[str, ...]] = (
        "name", "description", "address", "careers",
        "housing", "job_assistance", "job_guarantee", "accept_gi",
    )

    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    website: Optional[str] = Field(default=None, pattern=WEBSITE_PATTERN)
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(default=None, min_length=1)
    careers: Optional[List[Career]] = Field(default=None, min_length=1)
    average_rating: Optional[float] = Field(default=None, ge=1, le=10)
    average_cost: Optional[float] = Field(default=None, ge=0)
    housing: Optional[bool] = None
    job_assistance: Optional[bool] = None
    job_guarantee: Optional[bool] = None
    accept_gi: Optional[bool] = None

    model_config = {"str_strip_whitespace": True, "extra": "ignore"}

    @model_validator(mode="before")
    @classmethod
    def reject_null_required_fields(cls, data: Any) -> Any:
        """Omitting a required field is fine; setting it to null is not."""
        if isinstance(data, dict):
            nulled = [key for key in cls.NON_NULLABLE if key in data and data[key] is None]
            if nulled:
                raise ValueError(f"Fields cannot be null: {', '.join(nulled)}")
        return data


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class LocationResponse(BaseModel):
    """GeoJSON-style point plus the address parts returned by the geocoder."""

    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(description="[longitude, latitude]")
    formatted_address: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None


class BootcampResponse(BaseModel):
    """Full representation of a bootcamp."""

    id: uuid.UUID
    user: uuid.UUID = Field(description="Owner user id")
    name: str
    slug: str
    description: str
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    location: Optional[LocationResponse] = None
    careers: List[str] = Field(default_factory=list)
    average_rating: Optional[float] = None
    average_cost: Optional[float] = None
    photo: str = DEFAULT_PHOTO
    housing: bool = False
    job_assistance: bool = False
    job_guarantee: bool = False
    accept_gi: bool = False
    created_at: datetime

    @classmethod
    def from_model(cls, bootcamp: Bootcamp) -> "BootcampResponse":
        location = None
        if bootcamp.latitude is not None and bootcamp.longitude is not None:
            location = LocationResponse(
                coordinates=[bootcamp.longitude, bootcamp.latitude],
                formatted_address=bootcamp.formatted_address,
                street=bootcamp.street,
                city=bootcamp.city,
                state=bootcamp.state,
                zipcode=bootcamp.zipcode,
                country=bootcamp.country,
            )
        return cls(
            id=bootcamp.id,
            user=bootcamp.user_id,
            name=bootcamp.name,
            slug=bootcamp.slug,
            description=bootcamp.description,
            website=bootcamp.website,
            phone=bootcamp.phone,
            email=bootcamp.email,
            location=location,
            careers=list(bootcamp.careers or []),
            average_rating=bootcamp.average_rating,
            average_cost=bootcamp.average_cost,
            photo=bootcamp.photo or DEFAULT_PHOTO,
            housing=bool(bootcamp.housing),
            job_assistance=bool(bootcamp.job_assistance),
            job_guarantee=bool(bootcamp.job_guarantee),
            accept_gi=bool(bootcamp.accept_gi),
            created_at=bootcamp.created_at,
        )


class PageRef(BaseModel):
    page: int
    limit: int


class BootcampEnvelope(BaseModel):
    success: bool = True
    data: BootcampResponse


class BootcampListEnvelope(BaseModel):
    """
    Returned by GET /bootcamps.

    data items are plain dicts because `select` may trim the fields.
    count is the number of items on this page.
    """

    success: bool = True
    count: int
    pagination: Dict[str, PageRef] = Field(
        default_factory=dict,
        description="`next` and/or `prev` page references; a key is absent when no such page exists",
    )
    data: List[Dict[str, Any]]


class BootcampRadiusEnvelope(BaseModel):
    success: bool = True
    count: int
    data: List[BootcampResponse]


class PhotoEnvelope(BaseModel):
    success: bool = True
    data: str = Field(description="Stored photo filename")


class EmptyEnvelope(BaseModel):
    success: bool = True
    data: Dict[str, Any] = Field(default_factory=dict)
