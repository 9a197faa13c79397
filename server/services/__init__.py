"""Service layer for business logic."""

from server.services.auth_service import AuthService
from server.services.transfer_service import TransferService

__all__ = [
    "AuthService",
    "TransferService",
]
