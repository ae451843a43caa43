# tutushop/store.py
import asyncio
import json
import logging
import re
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List

import aiofiles
import aiofiles.os

from .config import Settings
from .errors import BadRequest

# One JSON array per category: data/products_<category>.json

logger = logging.getLogger(__name__)

Product = Dict[str, Any]

CATEGORY_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def validate_category(category: str) -> str:
    # the category becomes part of a file name; nothing that can leave data_dir
    if not CATEGORY_RE.match(category or ""):
        raise BadRequest("Invalid category")
    return category


class FileStore:
    def __init__(self, settings: Settings):
        self.data_dir: Path = settings.data_dir
        self.serialize_writes = settings.serialize_writes
        self._locks: Dict[str, asyncio.Lock] = {}

    def path_for(self, category: str) -> Path:
        return self.data_dir / f"products_{validate_category(category)}.json"

    def _get_lock(self, category: str) -> asyncio.Lock:
        if category not in self._locks:
            self._locks[category] = asyncio.Lock()
        return self._locks[category]

    @asynccontextmanager
    async def lock(self, category: str) -> AsyncIterator[None]:
        """Hold the category's load-modify-save section.

        With serialize_writes off this does nothing and concurrent writers
        to one category fall back to last-save-wins.
        """
        if not self.serialize_writes:
            yield
            return
        async with self._get_lock(category):
            yield

    async def load(self, category: str) -> List[Product]:
        path = self.path_for(category)
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            return []
        products = json.loads(raw)
        if not isinstance(products, list):
            raise ValueError(f"{path} does not hold a JSON array")
        return products

    async def save(self, category: str, products: List[Product]) -> None:
        path = self.path_for(category)
        await aiofiles.os.makedirs(self.data_dir, exist_ok=True)
        tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(products, indent=2, ensure_ascii=False))
        await aiofiles.os.replace(tmp_path, path)
        logger.debug("Saved %d products to %s", len(products), path)
