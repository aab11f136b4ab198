# app/core.py
import math
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, field_validator

# Request/response schemas for the catalog API.

UNCATEGORIZED = "Uncategorized"

T = TypeVar("T")


def normalize_category(value: Optional[str]) -> Optional[str]:
    """Blank and "Uncategorized" are stored as no category at all."""
    if value is None:
        return None
    value = value.strip()
    if not value or value.lower() == UNCATEGORIZED.lower():
        return None
    return value


def _required_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValueError(f"{field} is required")
    return value.strip()


def _not_bool(value):
    # float parsing would otherwise turn true into 1.0
    if isinstance(value, bool):
        raise ValueError("price must be a number")
    return value


def _positive_price(value: Optional[float]) -> float:
    if value is None:
        raise ValueError("price is required")
    if not math.isfinite(value) or value <= 0:
        raise ValueError("price must be a positive number")
    return value


class ProductIn(BaseModel):
    name: str
    price: float
    image: str
    category: Optional[str] = None

    @field_validator("name", "image")
    @classmethod
    def _text(cls, v, info):
        return _required_text(v, info.field_name)

    @field_validator("price", mode="before")
    @classmethod
    def _price_type(cls, v):
        return _not_bool(v)

    @field_validator("price")
    @classmethod
    def _price(cls, v):
        return _positive_price(v)

    @field_validator("category")
    @classmethod
    def _category(cls, v):
        return normalize_category(v)


class ProductPatch(BaseModel):
    """Fields a client may change on an existing product. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    price: Optional[float] = None
    image: Optional[str] = None
    category: Optional[str] = None

    @field_validator("name", "image")
    @classmethod
    def _text(cls, v, info):
        # an explicit null would blank a required field
        return _required_text(v, info.field_name)

    @field_validator("price", mode="before")
    @classmethod
    def _price_type(cls, v):
        return _not_bool(v)

    @field_validator("price")
    @classmethod
    def _price(cls, v):
        return _positive_price(v)

    @field_validator("category")
    @classmethod
    def _category(cls, v):
        return normalize_category(v)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class Envelope(BaseModel, Generic[T]):
    success: bool
    message: Optional[str] = None
    data: Optional[T] = None


def describe_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """Collapse pydantic error dicts into one human-readable line."""
    if any(e.get("type") == "missing" for e in errors):
        return "Please provide all fields"
    parts = []
    for e in errors:
        loc = [str(p) for p in e.get("loc", ()) if p not in ("body", "path", "query")]
        msg = str(e.get("msg", "invalid value")).removeprefix("Value error, ")
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request"


PatchLike = Union[ProductPatch, Dict[str, Any]]
CreateLike = Union[ProductIn, Dict[str, Any]]
