# tutushop/models.py
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Product(BaseModel):
    # client-defined fields ride along as extras; only the reserved ones are typed
    model_config = ConfigDict(extra="allow")

    id: int
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class UploadResult(BaseModel):
    url: str
    filename: str


class Message(BaseModel):
    message: str


class HealthStatus(BaseModel):
    status: str
    message: str
