# marketplace/models.py
"""SQLAlchemy ORM models for the marketplace schema.

Profiles are keyed by the identity provider's user id. Products carry the
listing lifecycle columns (status, views, sold_at); images and favorites are
removed with their product through ON DELETE CASCADE.
"""
import enum
import uuid
from sqlalchemy import (
    Boolean, CheckConstraint, Column, ForeignKey, Index, Integer, Numeric, Text,
    TIMESTAMP, UniqueConstraint, Uuid, false, func,
)
from sqlalchemy.orm import relationship
from .db import Base


class ListingStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    SOLD = "sold"
    ARCHIVED = "archived"


class Condition(str, enum.Enum):
    NEW = "new"
    LIKE_NEW = "like_new"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


def _in_clause(column, enum_cls):
    values = ", ".join(f"'{m.value}'" for m in enum_cls)
    return f"{column} IN ({values})"


class Profile(Base):
    __tablename__ = "profiles"
    id = Column(Uuid, primary_key=True)
    email = Column(Text, nullable=False, unique=True)
    full_name = Column(Text, default="")
    phone = Column(Text, default="")
    avatar_url = Column(Text, default="")
    location = Column(Text, default="")
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())


class Category(Base):
    __tablename__ = "categories"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False, unique=True)
    slug = Column(Text, nullable=False, unique=True, index=True)
    description = Column(Text, default="")
    icon = Column(Text, default="")
    parent_id = Column(Uuid, ForeignKey("categories.id", ondelete="SET NULL"), index=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())


class Product(Base):
    __tablename__ = "products"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Uuid, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    status = Column(Text, nullable=False, default=ListingStatus.DRAFT.value, server_default=ListingStatus.DRAFT.value, index=True)
    condition = Column(Text, default=Condition.GOOD.value)
    location = Column(Text, nullable=False)
    views = Column(Integer, nullable=False, default=0, server_default="0")
    featured = Column(Boolean, default=False, server_default=false())
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())
    sold_at = Column(TIMESTAMP(timezone=True))

    category = relationship("Category")
    seller = relationship("Profile")
    images = relationship(
        "ProductImage",
        order_by="ProductImage.display_order",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("views >= 0", name="ck_products_views_non_negative"),
        CheckConstraint(_in_clause("status", ListingStatus), name="ck_products_status"),
        CheckConstraint(_in_clause("condition", Condition), name="ck_products_condition"),
    )


class ProductImage(Base):
    __tablename__ = "product_images"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id = Column(Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    image_url = Column(Text, nullable=False)
    display_order = Column(Integer, default=0)
    is_primary = Column(Boolean, default=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())


class Favorite(Base):
    __tablename__ = "favorites"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    product = relationship("Product")

    __table_args__ = (UniqueConstraint("user_id", "product_id", name="uq_favorites_user_product"),)


Index("idx_products_created_at", Product.created_at.desc())
