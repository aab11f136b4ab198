# sdk/state.py
import logging
import math
from typing import Callable, Dict, List, Optional

from .catalog import CatalogAPIError, CatalogClient, Product

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"
ALL = "all"

SORT_KEYS = ("name-asc", "name-desc", "price-asc", "price-desc")


def display_category(product: Product) -> str:
    return product.category or UNCATEGORIZED


def validate_form(form: Dict[str, str]) -> Dict[str, str]:
    """Same rules the server applies; returns {field: message} for each problem."""
    errors: Dict[str, str] = {}
    if not (form.get("name") or "").strip():
        errors["name"] = "Product name is required"

    raw_price = str(form.get("price") or "").strip()
    if not raw_price:
        errors["price"] = "Price is required"
    else:
        try:
            price = float(raw_price)
        except ValueError:
            price = math.nan
        if not math.isfinite(price) or price <= 0:
            errors["price"] = "Price must be a positive number"

    if not (form.get("image") or "").strip():
        errors["image"] = "Image URL is required"
    return errors


def filter_and_sort(
    products: List[Product],
    search: str = "",
    category: str = ALL,
    sort: str = "name-asc",
) -> List[Product]:
    term = (search or "").lower()
    out = [
        p for p in products
        if term in p.name.lower() and (category == ALL or display_category(p) == category)
    ]
    # sorted() is stable, equal keys keep the fetched order
    if sort == "name-asc":
        out = sorted(out, key=lambda p: p.name.lower())
    elif sort == "name-desc":
        out = sorted(out, key=lambda p: p.name.lower(), reverse=True)
    elif sort == "price-asc":
        out = sorted(out, key=lambda p: p.price or 0)
    elif sort == "price-desc":
        out = sorted(out, key=lambda p: p.price or 0, reverse=True)
    return out


class CatalogState:
    """Last-fetched product list plus the UI's navigation and load status.

    status moves loading -> ready or loading -> error; retry() re-enters
    loading. view is "home" (the list) or "create" (the form, for a new
    product when editing is None, otherwise for that product).
    """

    def __init__(self, client: CatalogClient):
        self.client = client
        self.products: List[Product] = []
        self.status = "loading"
        self.error: Optional[str] = None
        self.view = "home"
        self.editing: Optional[Product] = None

    # ---------------------------
    # Loading
    # ---------------------------
    def load(self) -> None:
        self.status = "loading"
        try:
            products = self.client.list_products()
        except (CatalogAPIError, OSError) as e:
            logger.warning("Failed to fetch products: %s", e)
            self.products = []
            self.error = str(e)
            self.status = "error"
            return
        self.products = products
        self.error = None
        self.status = "ready"

    def retry(self) -> None:
        self.load()

    # ---------------------------
    # Derived views
    # ---------------------------
    def visible_products(self, search: str = "", category: str = ALL, sort: str = "name-asc") -> List[Product]:
        return filter_and_sort(self.products, search, category, sort)

    def categories(self) -> List[str]:
        seen = [ALL]
        for p in self.products:
            cat = display_category(p)
            if cat not in seen:
                seen.append(cat)
        return seen

    def stats(self) -> Dict[str, float]:
        total = sum(p.price or 0 for p in self.products)
        count = len(self.products)
        return {"count": count, "total_value": total, "average_price": total / count if count else 0.0}

    # ---------------------------
    # Navigation
    # ---------------------------
    def start_create(self) -> None:
        self.editing = None
        self.view = "create"

    def start_edit(self, product: Product) -> None:
        self.editing = product
        self.view = "create"

    def cancel_edit(self) -> None:
        self.editing = None
        self.view = "home"

    def form_defaults(self) -> Dict[str, str]:
        if self.editing is None:
            return {"name": "", "price": "", "image": "", "category": ""}
        p = self.editing
        return {"name": p.name, "price": f"{p.price:g}", "image": p.image, "category": p.category or ""}

    # ---------------------------
    # Mutations
    # ---------------------------
    def submit(self, form: Dict[str, str]) -> Dict[str, str]:
        """Create or update from form input.

        Returns field errors without calling the API when validation fails.
        API failures raise CatalogAPIError and leave local state as it was.
        """
        errors = validate_form(form)
        if errors:
            return errors

        fields = {
            "name": form["name"].strip(),
            "price": float(form["price"]),
            "image": form["image"].strip(),
        }
        category = (form.get("category") or "").strip()

        if self.editing is None:
            saved = self.client.create_product(category=category or None, **fields)
            self.products = self.products + [saved]
        else:
            # blank category on edit clears it
            fields["category"] = category or None
            saved = self.client.update_product(self.editing.id, **fields)
            self.products = [saved if p.id == saved.id else p for p in self.products]

        self.editing = None
        self.view = "home"
        return {}

    def delete(self, product: Product, confirm: Callable[[Product], bool]) -> bool:
        if not confirm(product):
            return False
        self.client.delete_product(product.id)
        # only dropped after the server confirmed
        self.products = [p for p in self.products if p.id != product.id]
        return True
