# sdk/catalog.py
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
import requests
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

DEFAULT_BASE_URL = os.getenv("CATALOG_API_URL", "http://127.0.0.1:8085")
DEFAULT_TIMEOUT = float(os.getenv("CATALOG_TIMEOUT", "10"))


class CatalogAPIError(Exception):
    """Raised when the API answers with success=false or a non-2xx status."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"HTTP {status_code}: {message}")


class Product(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    id: str
    name: str
    price: float
    image: str
    category: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def _unwrap(resp) -> Dict[str, Any]:
    """Decode an envelope, raising CatalogAPIError unless it reports success."""
    try:
        body = resp.json()
    except ValueError:
        raise CatalogAPIError(resp.status_code, resp.text or "invalid response")
    if not isinstance(body, dict):
        raise CatalogAPIError(resp.status_code, "unexpected response shape")
    if resp.status_code >= 400 or not body.get("success"):
        raise CatalogAPIError(resp.status_code, body.get("message") or f"HTTP {resp.status_code}")
    return body


def _one(resp) -> Product:
    body = _unwrap(resp)
    try:
        return Product.model_validate(body.get("data"))
    except ValidationError as e:
        raise CatalogAPIError(resp.status_code, f"malformed product in response: {e}") from e


def _many(resp) -> List[Product]:
    body = _unwrap(resp)
    try:
        return [Product.model_validate(p) for p in body.get("data") or []]
    except (ValidationError, TypeError) as e:
        raise CatalogAPIError(resp.status_code, f"malformed product list in response: {e}") from e


class CatalogClient:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = DEFAULT_TIMEOUT, session=None,
                 async_transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # any requests-compatible session works (tests pass a TestClient)
        self.session = session or requests.Session()
        # e.g. httpx.ASGITransport(app=app) to talk to an app in-process
        self.async_transport = async_transport

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def list_products(self) -> List[Product]:
        r = self.session.get(self._url("/products"), timeout=self.timeout)
        return _many(r)

    def get_product(self, product_id: str) -> Product:
        r = self.session.get(self._url(f"/products/{product_id}"), timeout=self.timeout)
        return _one(r)

    def create_product(self, name: str, price: float, image: str, category: Optional[str] = None) -> Product:
        payload = {"name": name, "price": price, "image": image}
        if category is not None:
            payload["category"] = category
        r = self.session.post(self._url("/products"), json=payload, timeout=self.timeout)
        return _one(r)

    def update_product(self, product_id: str, **fields) -> Product:
        r = self.session.put(self._url(f"/products/{product_id}"), json=fields, timeout=self.timeout)
        return _one(r)

    def delete_product(self, product_id: str) -> str:
        r = self.session.delete(self._url(f"/products/{product_id}"), timeout=self.timeout)
        return _unwrap(r).get("message", "")

    async def list_products_async(self) -> List[Product]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.async_transport) as client:
            r = await client.get(self._url("/products"))
            return _many(r)
