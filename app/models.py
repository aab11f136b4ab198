# app/models.py
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from sqlalchemy import Column, DateTime, Float, Integer, String, Text

from .database import Base


class ProductRecord(Base):
    __tablename__ = "products"

    # row number keeps list() in insertion order
    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    image = Column(Text, nullable=False)
    category = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class Product(BaseModel):
    """A stored catalog product as returned to clients (camelCase JSON)."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True, alias_generator=to_camel)

    id: str
    name: str
    price: float
    image: str
    category: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        # sqlite hands timestamps back without tzinfo
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v
