"""
API Module - Host UI interface.

Exposes the engine via REST API for a local host (phone, tablet, TV).
The host:
1. Lists categories and sets up teams
2. Creates a game
3. Posts actions and clock ticks
4. Renders the returned state
5. Exports a snapshot to resume later

One local game at a time. No user accounts.
"""

from .schemas import (
    # Requests
    CreateGameRequest,
    CustomCategoryRequest,
    ActionRequest,
    TickRequest,
    # Responses
    GameStateResponse,
    ActionResponse,
    CategoryInfo,
    CategoryListResponse,
    EndSessionResponse,
    ErrorResponse,
    HealthResponse,
    TeamInfo,
    # Snapshot
    GameSnapshot,
    # Enums
    ActionName,
    ErrorCode,
    SessionStatus,
)
from .service import APIService, InvalidSettingsError
from .app import create_app

__all__ = [
    # Requests
    "CreateGameRequest",
    "CustomCategoryRequest",
    "ActionRequest",
    "TickRequest",
    # Responses
    "GameStateResponse",
    "ActionResponse",
    "CategoryInfo",
    "CategoryListResponse",
    "EndSessionResponse",
    "ErrorResponse",
    "HealthResponse",
    "TeamInfo",
    # Snapshot
    "GameSnapshot",
    # Enums
    "ActionName",
    "ErrorCode",
    "SessionStatus",
    # Service
    "APIService",
    "InvalidSettingsError",
    "create_app",
]
