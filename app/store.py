# app/store.py
import logging
import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import List

from pydantic import ValidationError as SchemaError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .core import CreateLike, PatchLike, ProductIn, ProductPatch, describe_validation_errors
from .errors import BackendError, MalformedIdentifier, NotFoundError, ValidationError
from .models import Product, ProductRecord

# This file contains the catalog store operations. Every function takes an
# open Session and returns pydantic Products, never ORM rows.

logger = logging.getLogger(__name__)

_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def is_valid_product_id(value) -> bool:
    return isinstance(value, str) and bool(_ID_RE.match(value))


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(ts: datetime) -> datetime:
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def _find(db: Session, product_id: str) -> ProductRecord:
    if not is_valid_product_id(product_id):
        raise MalformedIdentifier()
    row = db.execute(select(ProductRecord).where(ProductRecord.id == product_id)).scalar_one_or_none()
    if row is None:
        raise NotFoundError()
    return row


def list_products(db: Session) -> List[Product]:
    try:
        rows = db.execute(select(ProductRecord).order_by(ProductRecord.pk)).scalars().all()
    except SQLAlchemyError as e:
        raise BackendError() from e
    return [Product.model_validate(r) for r in rows]


def get_product(db: Session, product_id: str) -> Product:
    try:
        return Product.model_validate(_find(db, product_id))
    except SQLAlchemyError as e:
        raise BackendError() from e


def create_product(db: Session, fields: CreateLike) -> Product:
    if not isinstance(fields, ProductIn):
        try:
            fields = ProductIn.model_validate(fields)
        except SchemaError as e:
            raise ValidationError(describe_validation_errors(e.errors())) from e

    now = _now()
    row = ProductRecord(
        id=uuid.uuid4().hex,
        name=fields.name,
        price=fields.price,
        image=fields.image,
        category=fields.category,
        created_at=now,
        updated_at=now,
    )
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        raise BackendError() from e

    logger.info("Created product %s (%s)", row.id, row.name)
    return Product.model_validate(row)


def update_product(db: Session, product_id: str, patch: PatchLike) -> Product:
    if not is_valid_product_id(product_id):
        raise MalformedIdentifier()
    if not isinstance(patch, ProductPatch):
        try:
            patch = ProductPatch.model_validate(patch)
        except SchemaError as e:
            raise ValidationError(describe_validation_errors(e.errors())) from e

    try:
        row = _find(db, product_id)
        changes = patch.changes()
        for field, value in changes.items():
            setattr(row, field, value)

        # required fields must survive the merge
        if not row.name or not row.image or row.price is None or row.price <= 0:
            db.rollback()
            raise ValidationError("name, price and image must stay non-empty")

        now = _now()
        created = _as_utc(row.created_at)
        if now <= created:
            now = created + timedelta(microseconds=1)
        row.updated_at = now

        db.commit()
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        raise BackendError() from e

    logger.info("Updated product %s fields=%s", product_id, sorted(changes))
    return Product.model_validate(row)


def delete_product(db: Session, product_id: str) -> None:
    try:
        row = _find(db, product_id)
        db.delete(row)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise BackendError() from e
    logger.info("Deleted product %s", product_id)
