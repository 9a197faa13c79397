"""Custom exception classes for the ChatVault server."""


class ChatVaultError(Exception):
    """
    Base exception class for all ChatVault errors.
    """
    code = "INTERNAL_ERROR"


class InvalidInputError(ChatVaultError):
    """
    Raised when an upload is missing its file or filename, or a size is invalid.
    """
    code = "INVALID_INPUT"


class EmptyFileError(InvalidInputError):
    """
    Raised when a zero-length file is uploaded.
    """
    code = "EMPTY_FILE"


class UserAlreadyExistsError(ChatVaultError):
    """
    Raised when attempting to register a username that already exists.
    """
    code = "USER_ALREADY_EXISTS"


class InvalidCredentialsError(ChatVaultError):
    """
    Raised when login credentials are invalid.
    """
    code = "INVALID_CREDENTIALS"


class InvalidAPIKeyError(ChatVaultError):
    """
    Raised when an API Key is invalid or revoked.
    """
    code = "INVALID_API_KEY"


class AccessDeniedError(ChatVaultError):
    """
    Raised when a transfer or blob is unknown or not owned by the caller.

    Both cases share this error so that another user's records cannot be
    probed for existence.
    """
    code = "ACCESS_DENIED"


class BlobStoreUnavailableError(ChatVaultError):
    """
    Raised when the blob store is unreachable or rejects a request.
    """
    code = "BLOB_STORE_UNAVAILABLE"


class BlobNotFoundError(ChatVaultError):
    """
    Raised by a blob store when a blob id cannot be resolved.
    """
    code = "CHUNK_NOT_FOUND"


class BlobTooLargeError(ChatVaultError):
    """
    Raised when the blob store refuses to serve a blob because of its size.

    Retrying cannot help; the blob was stored above the backend's download
    ceiling.
    """
    code = "BLOB_TOO_LARGE"


class ChunkNotFoundError(BlobNotFoundError):
    """
    Raised when a recorded chunk of a transfer can no longer be fetched.
    """


class ChecksumMismatchError(ChatVaultError):
    """
    Raised when a fetched chunk does not match its recorded checksum or size.
    """
    code = "CHECKSUM_MISMATCH"


class RecordStoreError(ChatVaultError):
    """
    Raised when the transfer metadata store fails to read or write.
    """
    code = "RECORD_STORE_ERROR"
