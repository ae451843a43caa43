# sdk/shopclient.py
import mimetypes
import os
from typing import Any, Dict, Optional

import httpx
import requests


class ShopClient:
    """Thin client for the TUTU Shop API.

    `session` defaults to a requests.Session; anything with the same
    get/post/put/delete signature works (e.g. FastAPI's TestClient).
    Non-2xx responses raise via raise_for_status().
    """

    def __init__(self, base_url: str = "http://localhost:3000", timeout: int = 10, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def health(self):
        r = self.session.get(self._url("/api/health"), timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    # Products
    def list_products(self, category: str):
        r = self.session.get(self._url(f"/api/products/{category}"), timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def get_product(self, category: str, product_id: int):
        r = self.session.get(self._url(f"/api/products/{category}/{product_id}"), timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def create_product(self, category: str, fields: Dict[str, Any]):
        r = self.session.post(self._url(f"/api/products/{category}"), json=fields, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def update_product(self, category: str, product_id: int, fields: Dict[str, Any]):
        r = self.session.put(self._url(f"/api/products/{category}/{product_id}"), json=fields, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def delete_product(self, category: str, product_id: int):
        r = self.session.delete(self._url(f"/api/products/{category}/{product_id}"), timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    # Uploads
    def _upload(self, kind: str, path: str, content_type: Optional[str] = None):
        content_type = content_type or mimetypes.guess_type(path)[0] or "application/octet-stream"
        with open(path, "rb") as fh:
            files = {kind: (os.path.basename(path), fh, content_type)}
            r = self.session.post(self._url(f"/api/upload/{kind}"), files=files, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def upload_image(self, path: str, content_type: Optional[str] = None):
        return self._upload("image", path, content_type)

    def upload_audio(self, path: str, content_type: Optional[str] = None):
        return self._upload("audio", path, content_type)

    # Async create (used by the concurrency demo)
    async def create_product_async(self, category: str, fields: Dict[str, Any]):
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            r = await client.post(self._url(f"/api/products/{category}"), json=fields)
            r.raise_for_status()
            return r.json()
