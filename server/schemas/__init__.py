"""Pydantic schemas for API requests and responses."""

from server.schemas.auth import (
    RegisterRequest,
    RegisterResponse,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
)
from server.schemas.transfers import (
    ChunkResponse,
    TransferSummaryResponse,
    TransferManifestResponse,
    ListTransfersResponse,
    DeleteTransferResponse,
)
from server.schemas.common import ErrorResponse, error_responses

__all__ = [
    "RegisterRequest",
    "RegisterResponse",
    "LoginRequest",
    "LoginResponse",
    "LogoutResponse",
    "ChunkResponse",
    "TransferSummaryResponse",
    "TransferManifestResponse",
    "ListTransfersResponse",
    "DeleteTransferResponse",
    "ErrorResponse",
    "error_responses",
]
