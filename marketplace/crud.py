# marketplace/crud.py
"""Generic data-store operations over the ORM models.

Every helper takes the request-scoped session first. Store failures are
translated into ``UpstreamError`` (or ``ConflictError`` for uniqueness
violations) after rolling the session back, so callers only ever see the
application error taxonomy.
"""
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import ConflictError, UpstreamError
from .models import Category

UNIQUE_VIOLATION = "23505"

DEFAULT_CATEGORIES = [
    {"name": "Electronics", "slug": "electronics", "description": "Mobile phones, computers, and electronic devices", "icon": "📱"},
    {"name": "Vehicles", "slug": "vehicles", "description": "Cars, motorcycles, and other vehicles", "icon": "🚗"},
    {"name": "Property", "slug": "property", "description": "Houses, apartments, and land for sale or rent", "icon": "🏠"},
    {"name": "Home & Garden", "slug": "home-garden", "description": "Furniture, appliances, and garden items", "icon": "🛋️"},
    {"name": "Fashion", "slug": "fashion", "description": "Clothing, shoes, and accessories", "icon": "👔"},
    {"name": "Jobs", "slug": "jobs", "description": "Job listings and career opportunities", "icon": "💼"},
    {"name": "Services", "slug": "services", "description": "Professional and local services", "icon": "🔧"},
    {"name": "Sports", "slug": "sports", "description": "Sports equipment and fitness gear", "icon": "⚽"},
    {"name": "Books & Music", "slug": "books-music", "description": "Books, musical instruments, and media", "icon": "📚"},
    {"name": "Pets", "slug": "pets", "description": "Pet supplies and pet listings", "icon": "🐾"},
]


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION:
        return True
    return "UNIQUE constraint failed" in str(orig)


@contextmanager
def store_errors(db: Session):
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        if _is_unique_violation(e):
            raise ConflictError("Duplicate record") from e
        raise UpstreamError(str(e.orig)) from e
    except SQLAlchemyError as e:
        db.rollback()
        raise UpstreamError(str(getattr(e, "orig", None) or e)) from e


def insert(db: Session, model, values: Dict[str, Any]):
    obj = model(**values)
    with store_errors(db):
        db.add(obj)
        db.commit()
        db.refresh(obj)
    return obj


def insert_many(db: Session, model, rows: Iterable[Dict[str, Any]]) -> List:
    objs = [model(**row) for row in rows]
    with store_errors(db):
        db.add_all(objs)
        db.commit()
    return objs


def select_one(db: Session, model, *conditions):
    with store_errors(db):
        return db.query(model).filter(*conditions).first()


def select_many(db: Session, model, conditions: Sequence = (), order_by: Sequence = (),
                skip: int = 0, limit: Optional[int] = None, with_count: bool = False):
    q = db.query(model)
    if conditions:
        q = q.filter(*conditions)
    with store_errors(db):
        total = q.count() if with_count else None
        if order_by:
            q = q.order_by(*order_by)
        if skip:
            q = q.offset(skip)
        if limit is not None:
            q = q.limit(limit)
        items = q.all()
    return {"total": total, "items": items}


def update(db: Session, model, conditions: Sequence, values: Dict[str, Any]):
    obj = select_one(db, model, *conditions)
    if not obj:
        return None
    with store_errors(db):
        for k, v in values.items():
            setattr(obj, k, v)
        db.commit()
        db.refresh(obj)
    return obj


def delete(db: Session, model, conditions: Sequence) -> int:
    with store_errors(db):
        count = db.query(model).filter(*conditions).delete(synchronize_session=False)
        db.commit()
    return count


def increment_field(db: Session, model, record_id, field: str, delta: int = 1) -> int:
    """Atomically add ``delta`` to ``field`` of one record.

    Issued as a single ``UPDATE ... SET field = field + delta`` so concurrent
    increments never overwrite each other. Returns the number of rows touched.
    """
    column = getattr(model, field)
    with store_errors(db):
        count = (
            db.query(model)
            .filter(model.id == record_id)
            .update({field: column + delta}, synchronize_session=False)
        )
        db.commit()
    return count


def seed_categories(db: Session) -> int:
    existing = {slug for (slug,) in db.query(Category.slug).all()}
    missing = [c for c in DEFAULT_CATEGORIES if c["slug"] not in existing]
    if missing:
        insert_many(db, Category, missing)
    return len(missing)
