"""
ProductCatalog — shared product list used to price SevenField lines.
"""
import logging
from typing import Any, Dict, Optional

from sitecalc.models.estimate_models import ProductRecord, new_id
from sitecalc.services.document_store import DocumentStore
from sitecalc.services.errors import NotFoundError, ValidationError
from sitecalc.services.pricing_rules import coerce_number

logger = logging.getLogger("sitecalc-api")

_UPDATABLE = ("code", "name", "price")


class ProductCatalog:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def list_products(self) -> list[ProductRecord]:
        return await self.store.list_products()

    async def search_products(self, term: Optional[str]) -> list[ProductRecord]:
        """Prefix match on name or code; an empty term returns nothing."""
        term = (term or "").strip()
        if not term:
            return []
        return await self.store.search_products(term)

    async def lookup_product_code(self, code: Optional[str]) -> Optional[ProductRecord]:
        code = (code or "").strip()
        if not code:
            return None
        return await self.store.find_product_by_code(code)

    async def add_product(
        self, code: str, name: str, price: Any = 0.0, product_id: Optional[str] = None
    ) -> ProductRecord:
        code = (code or "").strip()
        if not code:
            raise ValidationError("Product code is required")
        product = ProductRecord(
            id=product_id or new_id(),
            code=code,
            name=(name or "").strip(),
            price=coerce_number(price),
        )
        await self.store.save_product(product)
        logger.info(f"Product {product.code} added")
        return product

    async def update_product(self, product_id: str, changes: Dict[str, Any]) -> ProductRecord:
        product = await self.store.get_product(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        for key in _UPDATABLE:
            if key not in changes or changes[key] is None:
                continue
            if key == "price":
                product.price = coerce_number(changes[key])
            else:
                setattr(product, key, str(changes[key]).strip())
        if not product.code:
            raise ValidationError("Product code is required")
        await self.store.save_product(product)
        return product

    async def delete_product(self, product_id: str) -> None:
        if not await self.store.delete_product(product_id):
            raise NotFoundError("Product", product_id)
