# tutushop/catalog.py
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles.os
from pydantic import ValidationError

from .errors import BadRequest, NotFound
from .models import Product as ProductModel
from .store import FileStore, Product

logger = logging.getLogger(__name__)

UPLOADS_PREFIX = "/uploads/"
# product fields that may point at an uploaded file
FILE_FIELDS = ("image", "audioFile")
DIGITS_RE = re.compile(r"[0-9]+")


def utc_timestamp() -> str:
    """ISO-8601 UTC with milliseconds, e.g. 2026-10-19T08:15:30.123Z"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_product_id(raw: Any) -> Optional[int]:
    # plain digits only; int() alone would take "+1", " 1" and "1_0"
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if not isinstance(raw, str) or not DIGITS_RE.fullmatch(raw):
        return None
    return int(raw)


def _find_index(products: List[Product], product_id: Optional[int]) -> int:
    if product_id is None:
        return -1
    for i, p in enumerate(products):
        if p.get("id") == product_id:
            return i
    return -1


def _next_id(products: List[Product]) -> int:
    ids = [p["id"] for p in products if isinstance(p.get("id"), int)]
    return max(ids, default=0) + 1


def _check_reserved(record: Product) -> Product:
    try:
        ProductModel.model_validate(record)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
        raise BadRequest(f"Invalid product fields: {fields}") from e
    return record


class ProductService:
    def __init__(self, store: FileStore, uploads_dir: Path):
        self.store = store
        self.uploads_dir = uploads_dir

    async def list_products(self, category: str) -> List[Product]:
        return await self.store.load(category)

    async def get_product(self, category: str, product_id: Any) -> Product:
        products = await self.store.load(category)
        index = _find_index(products, parse_product_id(product_id))
        if index == -1:
            raise NotFound("Product not found")
        return products[index]

    async def create_product(self, category: str, fields: Dict[str, Any]) -> Product:
        async with self.store.lock(category):
            products = await self.store.load(category)
            new_id = _next_id(products)
            now = utc_timestamp()
            product = {"id": new_id}
            product.update(fields)
            product["id"] = new_id
            product["createdAt"] = now
            product["updatedAt"] = now
            products.append(_check_reserved(product))
            await self.store.save(category, products)
        logger.info("Created product %s/%s", category, product["id"])
        return product

    async def update_product(self, category: str, product_id: Any, fields: Dict[str, Any]) -> Product:
        async with self.store.lock(category):
            products = await self.store.load(category)
            pid = parse_product_id(product_id)
            index = _find_index(products, pid)
            if index == -1:
                raise NotFound("Product not found")

            updated = dict(products[index])
            updated.update(fields)
            updated["id"] = pid
            updated["updatedAt"] = utc_timestamp()
            products[index] = _check_reserved(updated)
            await self.store.save(category, products)
        logger.info("Updated product %s/%s", category, pid)
        return updated

    async def delete_product(self, category: str, product_id: Any) -> Dict[str, str]:
        async with self.store.lock(category):
            products = await self.store.load(category)
            index = _find_index(products, parse_product_id(product_id))
            if index == -1:
                raise NotFound("Product not found")

            product = products.pop(index)
            for field in FILE_FIELDS:
                await self._remove_upload(product.get(field))
            await self.store.save(category, products)
        logger.info("Deleted product %s/%s", category, product.get("id"))
        return {"message": "Product deleted successfully"}

    async def _remove_upload(self, url: Any) -> None:
        """Best effort: failures are logged, never raised."""
        if not isinstance(url, str) or not url.startswith(UPLOADS_PREFIX):
            return
        root = self.uploads_dir.resolve()
        target = (root / url[len(UPLOADS_PREFIX):]).resolve()
        if root not in target.parents:
            logger.error("Refusing to delete %s: outside the uploads directory", url)
            return
        try:
            await aiofiles.os.remove(target)
        except OSError as e:
            logger.error("Error deleting uploaded file %s: %s", target, e)
