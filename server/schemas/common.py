"""Common schemas used across multiple endpoints."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of every error response: a readable detail and a stable code."""
    detail: str
    code: str


def error_responses(*status_codes: int) -> dict:
    """OpenAPI `responses` metadata declaring ErrorResponse for each status."""
    return {code: {"model": ErrorResponse} for code in status_codes}
