"""Request and response schemas for the HTTP API."""

from .schemas import (
    ACTION_SCHEMAS,
    ActionResponse,
    CreateGameRequest,
    GameSnapshot,
    RestartRequest,
    SubmitResultRequest
)

__all__ = [
    "ACTION_SCHEMAS",
    "ActionResponse",
    "CreateGameRequest",
    "GameSnapshot",
    "RestartRequest",
    "SubmitResultRequest"
]
