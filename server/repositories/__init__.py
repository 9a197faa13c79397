"""Repository layer for data access."""

from server.repositories.user_repository import User, UserRepository
from server.repositories.transfer_repository import Transfer, TransferRepository

__all__ = [
    "User",
    "UserRepository",
    "Transfer",
    "TransferRepository",
]
