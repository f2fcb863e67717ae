"""Shared FastAPI dependencies."""

import hmac
from typing import Annotated

import structlog
from fastapi import Depends, Header, Request

from pulseboard.config import Settings
from pulseboard.exceptions import AuthenticationError, StorageError
from pulseboard.services.board_state import BoardStateManager

logger = structlog.get_logger()

API_KEY_HEADER = "X-API-Key"


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_board_manager(request: Request) -> BoardStateManager:
    manager = getattr(request.app.state, "board_manager", None)
    if manager is None:
        raise StorageError("Board store is not initialized")
    return manager


AppSettings = Annotated[Settings, Depends(get_app_settings)]
BoardManager = Annotated[BoardStateManager, Depends(get_board_manager)]


def verify_api_key(settings: Settings, api_key: str | None) -> bool:
    expected = settings.integration_api_key.get_secret_value()
    if not expected:
        logger.error("integration_api_key_not_configured")
        return False
    return api_key is not None and hmac.compare_digest(api_key.encode(), expected.encode())


async def require_api_key(
    settings: AppSettings,
    x_api_key: Annotated[str | None, Header(alias=API_KEY_HEADER)] = None,
) -> None:
    """Reject integration calls without the shared secret."""
    if not verify_api_key(settings, x_api_key):
        logger.warning("integration_auth_failed", key_present=x_api_key is not None)
        raise AuthenticationError()
