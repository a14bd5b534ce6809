"""
FastAPI Application - REST API for a local host UI.

Endpoints:
    GET    /api/v1/categories                   List built-in categories
    POST   /api/v1/games                        Set up (and start) a game
    POST   /api/v1/games/restore                Restore a game from a snapshot
    GET    /api/v1/games/{id}                   Get game state
    DELETE /api/v1/games/{id}                   End the game
    POST   /api/v1/games/{id}/actions           Post an action
    POST   /api/v1/games/{id}/tick              Advance the turn clock
    GET    /api/v1/games/{id}/snapshot          Export a restorable snapshot

One game at a time: creating or restoring a game replaces the current one.
All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union
import logging
import os

# Environment configuration
TIMESUP_ENV = os.getenv("TIMESUP_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger("timesup.api")

ERROR_STATUS = {
    "SESSION_NOT_FOUND": 404,
    "INVALID_ACTION": 409,
}


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Body, Query
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from pydantic import ValidationError

    from .service import APIService, InvalidSettingsError
    from .schemas import (
        # Request models
        CreateGameRequest,
        ActionRequest,
        TickRequest,
        # Response models
        GameStateResponse,
        ActionResponse,
        CategoryListResponse,
        ErrorResponse,
        EndSessionResponse,
        HealthResponse,
        GameSnapshot,
        # Enums
        ErrorCode,
    )
    from .. import __version__

    app = FastAPI(
        title="Timesup Engine API",
        description="""
Party game turn engine - timed team turns over a shared term pool.

## Game Flow

1. `POST /games` with teams and categories (started by default)
2. `POST /actions` with `start_turn` at every hand-off
3. `correct` / `skip` / `wrong` while the turn runs, `POST /tick` every second
4. On `round_ended`: `next_round`; on `game_ended`: show the winners

## Error Codes

| Code | Description |
|------|-------------|
| `INVALID_ACTION` | Action not legal in the current phase |
| `INVALID_SETTINGS` | Setup is not playable |
| `UNKNOWN_CATEGORY` | Category id does not exist |
| `SESSION_NOT_FOUND` | Game does not exist or was replaced |
| `INVALID_SNAPSHOT` | Snapshot could not be restored |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def error_from(response: ErrorResponse) -> JSONResponse:
        status_code = ERROR_STATUS.get(response.error_code.value, 400)
        return make_error_response(
            response.error_code, response.error, status_code, response.details,
        )

    # =========================================================================
    # Content
    # =========================================================================

    @app.get(
        "/api/v1/categories",
        response_model=CategoryListResponse,
        tags=["Content"],
        summary="List built-in categories",
    )
    async def list_categories() -> CategoryListResponse:
        return api_service.list_categories()

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games",
        response_model=GameStateResponse,
        responses={400: {"model": ErrorResponse, "description": "Setup not playable"}},
        tags=["Games"],
        summary="Set up a new game",
    )
    async def create_game(request: CreateGameRequest) -> Union[GameStateResponse, JSONResponse]:
        """
        Set up a new game from team names and category ids.

        Replaces any game in progress.
        """
        try:
            return api_service.create_game(request)
        except InvalidSettingsError as e:
            logger.info("setup rejected: %s", e)
            return make_error_response(
                ErrorCode.INVALID_SETTINGS, str(e), details={"errors": e.errors},
            )
        except ValueError as e:
            return make_error_response(ErrorCode.UNKNOWN_CATEGORY, str(e))

    @app.post(
        "/api/v1/games/restore",
        response_model=GameStateResponse,
        responses={400: {"model": ErrorResponse, "description": "Invalid snapshot"}},
        tags=["Games"],
        summary="Restore a game from a snapshot",
    )
    async def restore_game(
        snapshot: Annotated[dict, Body(description="Snapshot from GET /snapshot")],
    ) -> Union[GameStateResponse, JSONResponse]:
        try:
            parsed = GameSnapshot.model_validate(snapshot)
        except ValidationError as e:
            return make_error_response(
                ErrorCode.INVALID_SNAPSHOT,
                "Snapshot could not be restored",
                details={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
            )
        return api_service.restore_snapshot(parsed)

    @app.get(
        "/api/v1/games/{session_id}",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Get game state",
    )
    async def get_game(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        response = api_service.get_state(session_id)
        if isinstance(response, ErrorResponse):
            return error_from(response)
        return response

    @app.delete(
        "/api/v1/games/{session_id}",
        response_model=EndSessionResponse,
        tags=["Games"],
        summary="End the game",
    )
    async def end_game(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndSessionResponse:
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Game Loop Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games/{session_id}/actions",
        response_model=ActionResponse,
        responses={
            404: {"model": ErrorResponse, "description": "Game not found"},
            409: {"model": ErrorResponse, "description": "Action not legal now"},
        },
        tags=["Game Loop"],
        summary="Post an action",
    )
    async def post_action(
        session_id: str, request: ActionRequest,
    ) -> Union[ActionResponse, JSONResponse]:
        """
        Apply an action to the running game.

        Guess outcomes (`correct`, `skip`, `wrong`) apply to the active
        team's current term. `perk_effect` takes its effect fields from
        the body.
        """
        response = api_service.apply_action(session_id, request)
        if isinstance(response, ErrorResponse):
            return error_from(response)
        return response

    @app.post(
        "/api/v1/games/{session_id}/tick",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Advance the turn clock",
    )
    async def tick(
        session_id: str,
        request: Annotated[Optional[TickRequest], Body()] = None,
    ) -> Union[ActionResponse, JSONResponse]:
        seconds = request.seconds if request else 1.0
        response = api_service.tick(session_id, seconds)
        if isinstance(response, ErrorResponse):
            return error_from(response)
        return response

    @app.get(
        "/api/v1/games/{session_id}/snapshot",
        response_model=GameSnapshot,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Export a restorable snapshot",
    )
    async def get_snapshot(session_id: str) -> Union[GameSnapshot, JSONResponse]:
        response = api_service.export_snapshot(session_id)
        if isinstance(response, ErrorResponse):
            return error_from(response)
        return response

    # =========================================================================
    # System
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            service="timesup-engine",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Timesup Engine API",
            "version": __version__,
            "env": TIMESUP_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn timesup.api.app:app
app = None
try:
    app = create_app()
except ImportError:
    # FastAPI not installed
    pass
