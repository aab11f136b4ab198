# app/errors.py
from typing import Optional

# Error taxonomy shared by the store and the HTTP layer.


class CatalogError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CatalogError):
    status_code = 400
    default_message = "Please provide all fields"


class MalformedIdentifier(CatalogError):
    status_code = 400
    default_message = "Invalid Product ID"


class NotFoundError(CatalogError):
    status_code = 404
    default_message = "Product not found"


class BackendError(CatalogError):
    status_code = 500
    default_message = "Server error"
