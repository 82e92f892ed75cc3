# marketplace/schemas.py
from datetime import datetime
from typing import Annotated, ClassVar, List, Literal, Optional, Tuple
from uuid import UUID

from pydantic import (
    BaseModel, ConfigDict, EmailStr, Field, HttpUrl, StringConstraints, ValidationInfo, field_validator,
)

from .models import Condition, ListingStatus

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]


class InputModel(BaseModel):
    model_config = ConfigDict(use_enum_values=True)


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class PartialUpdate(InputModel):
    """Partial update body: omitted fields are left alone, explicit nulls are refused."""

    nullable_fields: ClassVar[Tuple[str, ...]] = ()

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, value, info: ValidationInfo):
        if value is None and info.field_name not in cls.nullable_fields:
            raise ValueError("may not be null")
        return value


# auth

class SignupRequest(InputModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: NonEmptyStr
    phone: Optional[str] = None
    location: NonEmptyStr


class LoginRequest(InputModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


# profiles

class ProfileOut(ORMModel):
    id: UUID
    email: str
    full_name: Optional[str] = ""
    phone: Optional[str] = ""
    avatar_url: Optional[str] = ""
    location: Optional[str] = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PublicProfileOut(ORMModel):
    id: UUID
    full_name: Optional[str] = ""
    location: Optional[str] = ""
    avatar_url: Optional[str] = ""
    created_at: Optional[datetime] = None


class ProfileUpdate(PartialUpdate):
    full_name: Optional[NonEmptyStr] = None
    phone: Optional[TrimmedStr] = None
    location: Optional[NonEmptyStr] = None
    avatar_url: Optional[HttpUrl] = None


# categories

class CategoryOut(ORMModel):
    id: UUID
    name: str
    slug: str
    description: Optional[str] = ""
    icon: Optional[str] = ""
    parent_id: Optional[UUID] = None
    created_at: Optional[datetime] = None


# products

class SellerOut(ORMModel):
    id: UUID
    full_name: Optional[str] = ""
    location: Optional[str] = ""
    avatar_url: Optional[str] = ""


class SellerContactOut(SellerOut):
    phone: Optional[str] = ""
    email: Optional[str] = ""


class ImageOut(ORMModel):
    id: UUID
    product_id: UUID
    image_url: str
    display_order: Optional[int] = 0
    is_primary: Optional[bool] = False
    created_at: Optional[datetime] = None


class ProductOut(ORMModel):
    id: UUID
    user_id: UUID
    category_id: UUID
    title: str
    description: str
    price: float
    status: str
    condition: Optional[str] = None
    location: str
    views: int = 0
    featured: Optional[bool] = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    sold_at: Optional[datetime] = None
    category: Optional[CategoryOut] = None
    seller: Optional[SellerOut] = None
    images: List[ImageOut] = []


class ProductDetail(ProductOut):
    seller: Optional[SellerContactOut] = None


class ProductCreate(InputModel):
    title: NonEmptyStr
    description: NonEmptyStr
    price: float = Field(..., ge=0)
    category_id: UUID
    condition: Condition
    location: NonEmptyStr
    images: Optional[List[str]] = None
    status: Optional[Literal["draft", "active"]] = None


class ProductUpdate(PartialUpdate):
    nullable_fields: ClassVar[Tuple[str, ...]] = ("sold_at",)

    title: Optional[NonEmptyStr] = None
    description: Optional[NonEmptyStr] = None
    price: Optional[float] = Field(None, ge=0)
    category_id: Optional[UUID] = None
    condition: Optional[Condition] = None
    location: Optional[NonEmptyStr] = None
    status: Optional[ListingStatus] = None
    sold_at: Optional[datetime] = None


class StatusUpdate(InputModel):
    status: ListingStatus


# favorites

class FavoriteCreate(InputModel):
    product_id: UUID


class FavoriteOut(ORMModel):
    id: UUID
    user_id: UUID
    product_id: UUID
    created_at: Optional[datetime] = None
    product: Optional[ProductOut] = None
