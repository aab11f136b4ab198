# app/main.py
import logging
from typing import List

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from . import config, store
from .core import Envelope, ProductIn, ProductPatch, describe_validation_errors
from .database import get_db
from .errors import BackendError, CatalogError, MalformedIdentifier
from .models import Product

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="catalog-store")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------
# Error envelopes
# ---------------------------
def _fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    return _fail(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return _fail(400, describe_validation_errors(exc.errors()))


def _guard(action: str, fn, *args):
    """Run a store call, letting catalog errors through and masking the rest."""
    try:
        return fn(*args)
    except CatalogError:
        raise
    except Exception as e:
        logger.error("Error %s: %s", action, e, exc_info=True)
        raise BackendError() from e


# ---------------------------
# Dependencies
# ---------------------------
def product_id_param(product_id: str) -> str:
    # resolved before the body is parsed, so a bad id never reaches the store
    if not store.is_valid_product_id(product_id):
        raise MalformedIdentifier()
    return product_id


# ---------------------------
# Product endpoints
# ---------------------------
@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/products", response_model=Envelope[List[Product]], response_model_exclude_none=True)
def list_products(db: Session = Depends(get_db)):
    products = _guard("fetching products", store.list_products, db)
    return Envelope(success=True, data=products)


@app.post("/products", status_code=201, response_model=Envelope[Product], response_model_exclude_none=True)
def create_product(payload: ProductIn, db: Session = Depends(get_db)):
    product = _guard("creating product", store.create_product, db, payload)
    return Envelope(success=True, message="Product created", data=product)


@app.get("/products/{product_id}", response_model=Envelope[Product], response_model_exclude_none=True)
def get_product(product_id: str = Depends(product_id_param), db: Session = Depends(get_db)):
    product = _guard("fetching product", store.get_product, db, product_id)
    return Envelope(success=True, data=product)


@app.put("/products/{product_id}", response_model=Envelope[Product], response_model_exclude_none=True)
def update_product(
    payload: ProductPatch,
    product_id: str = Depends(product_id_param),
    db: Session = Depends(get_db),
):
    logger.debug("Updating product %s with %s", product_id, payload.changes())
    product = _guard("updating product", store.update_product, db, product_id, payload)
    return Envelope(success=True, message="Product updated", data=product)


@app.delete("/products/{product_id}")
def delete_product(product_id: str = Depends(product_id_param), db: Session = Depends(get_db)):
    _guard("deleting product", store.delete_product, db, product_id)
    return {"success": True, "message": "Product deleted"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=config.PORT, log_level=config.LOG_LEVEL.lower())
