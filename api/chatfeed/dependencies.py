"""FastAPI dependencies shared by the route modules."""

from typing import Annotated

from fastapi import Depends, Request

from .config import Settings, get_settings
from .db.store import MessageStore
from .errors.problem_details import ServiceUnavailableError


def get_message_store(request: Request) -> MessageStore:
    """Return the message store created during application startup."""
    store = getattr(request.app.state, "message_store", None)
    if store is None:
        raise ServiceUnavailableError("Message store is not initialized")
    return store


def get_app_settings(request: Request) -> Settings:
    """Return the settings the application was created with."""
    return getattr(request.app.state, "settings", None) or get_settings()


MessageStoreDep = Annotated[MessageStore, Depends(get_message_store)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
