from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

MediaType = Literal["image", "video", "unknown"]


class Memory(BaseModel):
    """
    A single stored media file, derived from the storage directory on every listing.
    """
    filename: str  # Storage name, also the item's identity
    type: MediaType
    title: str
    date: str  # Creation date formatted D/M/YYYY
    size: int  # File size in bytes
    created: datetime = Field(exclude=True)  # Sort key only, not serialized


class UploadResult(BaseModel):
    success: bool = True
    filename: str
    message: str
    size: int


class DeleteResult(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class HealthStatus(BaseModel):
    status: str
    timestamp: str
    uptime: float  # Seconds since the application was created
    memory: dict[str, int]
    version: str
