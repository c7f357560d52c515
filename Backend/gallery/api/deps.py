from fastapi import Request

from gallery.core.config import Settings
from gallery.services.storage import MemoryStorage


def get_storage(request: Request) -> MemoryStorage:
    """
    FastAPI dependency returning the storage service built by the app factory.
    """
    return request.app.state.storage


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
