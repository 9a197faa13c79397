"""HTTP client for communicating with the ChatVault server."""

import base64
import os
import time
import uuid
from pathlib import Path
from typing import Optional

import httpx

from common.chunk_codec import join, verify_checksum
from common.logging_config import get_logger
from common.types import TransferManifest
from cli.config import Config
from cli.utils import ProgressReader, clear_progress, finish_progress, format_file_size, show_progress

logger = get_logger(__name__)

ERROR_MESSAGES = {
    'INVALID_API_KEY': 'Not authenticated. Please run: login <username> <password>',
    'USER_ALREADY_EXISTS': 'Username already taken. Try logging in or choose a different username.',
    'INVALID_CREDENTIALS': 'Invalid username or password.',
    'INVALID_INPUT': 'The server rejected the request as invalid.',
    'EMPTY_FILE': 'Empty files cannot be uploaded.',
    'ACCESS_DENIED': 'Transfer not found or access denied.',
    'CHUNK_NOT_FOUND': 'A chunk of this transfer can no longer be fetched from the blob store.',
    'CHECKSUM_MISMATCH': 'File integrity check failed during download.',
    'BLOB_STORE_UNAVAILABLE': 'The blob store is currently unavailable. Please try again later.',
    'BLOB_TOO_LARGE': 'This file is stored above the blob store\'s download limit and cannot be fetched.',
    'RECORD_STORE_ERROR': 'The file was stored but could not be recorded. Please upload it again.',
}

STATUS_MESSAGES = {
    400: 'Bad request',
    401: 'Not authenticated',
    403: 'Access forbidden',
    404: 'Not found',
    500: 'Server error',
    502: 'Bad gateway',
    503: 'Service unavailable',
}


# Server errors that a retry cannot fix
NON_RETRYABLE_CODES = {'BLOB_TOO_LARGE'}


class IntegrityError(Exception):
    """Raised when a downloaded chunk does not match its manifest entry."""


class ChatVaultClient:
    """HTTP client for the ChatVault API with retry logic and error handling."""

    def __init__(self, config: Config):
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout()
        )
        self.request_id = None
        logger.info(f"Initialized ChatVaultClient [base_url={config.get_base_url()}]")

    def _calculate_upload_timeout(self, file_size: int) -> float:
        """
        Calculate timeout for upload based on file size.

        Returns:
            Timeout in seconds (60s base + 1s per MiB)
        """
        return 60.0 + file_size / (1024 * 1024)

    def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        max_retries: Optional[int] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic on 5xx errors and network failures.

        Args:
            method: HTTP method (GET, POST, DELETE, etc.)
            endpoint: API endpoint path
            max_retries: Max retry attempts (uses config default if None)
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response object

        Raises:
            ConnectionError: If max retries exceeded or connection fails
        """
        retry_config = self.config.get_retry_config()
        max_retries = max_retries if max_retries is not None else retry_config['max_retries']
        backoff = retry_config['retry_backoff_multiplier']

        last_exception = None

        self.request_id = str(uuid.uuid4())
        kwargs.setdefault('headers', {})
        kwargs['headers']['X-Request-ID'] = self.request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        for attempt in range(max_retries + 1):
            try:
                response = self.session.request(method, endpoint, **kwargs)

                logger.debug(
                    f"Response received: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
                )

                if (
                    response.status_code >= 500
                    and attempt < max_retries
                    and self._error_code(response) not in NON_RETRYABLE_CODES
                ):
                    delay = backoff ** attempt
                    logger.warning(
                        f"Server error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} status={response.status_code}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue

                if 400 <= response.status_code < 500:
                    logger.warning(
                        f"Client error: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
                    )
                return response

            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                if attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                else:
                    logger.error(
                        f"Network error (max retries exceeded): {method} {endpoint} error={e} [request_id={self.request_id}]"
                    )

        if isinstance(last_exception, httpx.TimeoutException):
            raise ConnectionError("Request timed out. Server may be overloaded.")
        raise ConnectionError("Cannot connect to ChatVault server. Is it running?")

    @staticmethod
    def _error_code(response: httpx.Response) -> str:
        try:
            return response.json().get('code', 'UNKNOWN')
        except (ValueError, AttributeError):
            return 'UNKNOWN'

    def _format_error(self, response: httpx.Response) -> str:
        """
        Map HTTP errors to user-friendly messages.
        """
        try:
            error_data = response.json()
            detail = error_data.get('detail', 'Unknown error')
            code = error_data.get('code', 'UNKNOWN')
        except ValueError:
            detail = response.text if response.text else 'Unknown error'
            code = 'UNKNOWN'

        if code in ERROR_MESSAGES:
            return ERROR_MESSAGES[code]

        message = STATUS_MESSAGES.get(response.status_code, detail)
        return f"{message} (Code: {code})" if code != 'UNKNOWN' else message

    def _get_auth_header(self) -> dict:
        """
        Get Authorization header with API key.

        Raises:
            ValueError: If no API key is configured
        """
        api_key = self.config.get_api_key()
        if not api_key:
            raise ValueError("Not logged in. Please run: login <username> <password>")
        return {'Authorization': f'Bearer {api_key}'}

    def register(self, username: str, password: str) -> str:
        logger.info(f"Attempting to register user: {username}")
        try:
            response = self._request_with_retry(
                'POST',
                '/auth/register',
                json={'username': username, 'password': password}
            )
        except ConnectionError as e:
            logger.error(f"Connection error during registration: {e}")
            return f"Error: {e}"

        if response.status_code != 201:
            logger.warning(f"Registration failed for user: {username} status={response.status_code}")
            return f"Registration failed: {self._format_error(response)}"

        data = response.json()
        self.config.set_api_key(data['api_key'])
        logger.info(f"Registration successful for user: {username} [user_id={data['user_id']}]")
        return f"Registration successful!\nUser ID: {data['user_id']}\nAPI key saved to config."

    def login(self, username: str, password: str) -> str:
        logger.info(f"Attempting to login user: {username}")
        try:
            response = self._request_with_retry(
                'POST',
                '/auth/login',
                json={'username': username, 'password': password}
            )
        except ConnectionError as e:
            logger.error(f"Connection error during login: {e}")
            return f"Error: {e}"

        if response.status_code != 200:
            logger.warning(f"Login failed for user: {username} status={response.status_code}")
            return f"Login failed: {self._format_error(response)}"

        self.config.set_api_key(response.json()['api_key'])
        logger.info(f"Login successful for user: {username}")
        return "Login successful!\nAPI key updated in config."

    def logout(self) -> str:
        try:
            headers = self._get_auth_header()
        except ValueError as e:
            return f"Error: {e}"

        try:
            response = self._request_with_retry('POST', '/auth/logout', headers=headers)
        except ConnectionError as e:
            return f"Error: {e}"

        # a key the server already rejects is as good as revoked
        if response.status_code not in (200, 401):
            return f"Logout failed: {self._format_error(response)}"

        self.config.clear_api_key()
        return "Logged out. API key removed from config."

    def upload(self, file_path: str, thumbnail_path: Optional[str] = None) -> str:
        """
        Upload one file. The server decides whether it is chunked.

        Args:
            file_path: Local path of the file to upload
            thumbnail_path: Optional small image sent as the transfer's preview

        Returns:
            Formatted result message
        """
        try:
            headers = self._get_auth_header()
        except ValueError as e:
            return f"Error: {e}"

        path = Path(file_path).expanduser()
        if not path.exists():
            return f"Error: File not found: {file_path}"
        if not path.is_file():
            return f"Error: Not a file: {file_path}"

        file_size = path.stat().st_size
        if file_size == 0:
            return f"Error: File is empty: {file_path}"

        data = {}
        if thumbnail_path:
            thumb = Path(thumbnail_path).expanduser()
            if not thumb.is_file():
                return f"Error: Thumbnail not found: {thumbnail_path}"
            data['thumbnail'] = base64.b64encode(thumb.read_bytes()).decode('ascii')

        upload_timeout = self._calculate_upload_timeout(file_size)
        logger.info(f"Uploading {path} ({file_size} bytes)")

        try:
            with open(path, 'rb') as f:
                files = {'file': (path.name, ProgressReader(f, file_size, f"Uploading {path.name}"))}
                # uploads are not idempotent; a retry could store the file twice
                response = self._request_with_retry(
                    'POST',
                    '/transfers',
                    max_retries=0,
                    files=files,
                    data=data,
                    headers=headers,
                    timeout=upload_timeout,
                )
        except ConnectionError as e:
            clear_progress()
            return f"Error uploading {file_path}: {e}"
        except OSError as e:
            clear_progress()
            return f"Error reading {file_path}: {e}"

        if response.status_code != 201:
            return f"Error uploading {file_path}: {self._format_error(response)}"

        result = response.json()
        return (
            f"Uploaded: {result['original_name']} "
            f"(ID: {result['transfer_id']}, "
            f"Size: {format_file_size(result['size'])}, "
            f"Chunks: {result['chunk_count']})"
        )

    def list_transfers(self) -> str:
        try:
            headers = self._get_auth_header()
        except ValueError as e:
            return f"Error: {e}"

        try:
            response = self._request_with_retry('GET', '/transfers', headers=headers)
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        transfers = response.json()['transfers']
        if not transfers:
            return "No transfers yet."

        output = [f"Found {len(transfers)} transfer(s):\n"]
        for transfer in transfers:
            preview = f", {transfer['preview_type']}" if transfer.get('preview_type') else ""
            output.append(
                f"  - {transfer['original_name']} (ID: {transfer['transfer_id']})\n"
                f"    Size: {format_file_size(transfer['size'])} in {transfer['chunk_count']} chunk(s){preview}\n"
                f"    Created: {transfer['created_at']}"
            )
        return '\n'.join(output)

    def get_manifest(self, transfer_id: str) -> TransferManifest:
        """
        Fetch the manifest of a transfer.

        Raises:
            ValueError: Not logged in, or the server refused the request
            ConnectionError: Server unreachable
        """
        headers = self._get_auth_header()
        response = self._request_with_retry('GET', f'/transfers/{transfer_id}', headers=headers)
        if response.status_code != 200:
            raise ValueError(self._format_error(response))
        return TransferManifest.from_dict(response.json())

    def info(self, transfer_id: str) -> str:
        try:
            manifest = self.get_manifest(transfer_id)
        except (ValueError, ConnectionError) as e:
            return f"Error: {e}"

        output = [
            f"{manifest.original_name} (ID: {manifest.transfer_id})",
            f"  Size: {format_file_size(manifest.size)}",
            f"  Created: {manifest.created_at.isoformat()}",
            f"  Preview: {manifest.preview_type or 'none'}",
            f"  Chunks ({len(manifest.chunks)}):",
        ]
        for chunk in manifest.chunks:
            output.append(
                f"    #{chunk.chunk_index + 1} {chunk.blob_id} "
                f"{format_file_size(chunk.size)} sha256={chunk.checksum[:12]}..."
            )
        return '\n'.join(output)

    def _fetch_chunks(self, manifest: TransferManifest, headers: dict) -> bytes:
        """
        Fetch every chunk of manifest in order and reassemble the payload.

        Raises:
            IntegrityError: A chunk's size or checksum differs from the manifest
            ValueError: The server refused a chunk
            ConnectionError: Server unreachable
        """
        label = f"Downloading {manifest.original_name}"
        pieces = []
        fetched = 0
        for chunk in manifest.chunks:
            response = self._request_with_retry('GET', f'/blobs/{chunk.blob_id}', headers=headers)
            if response.status_code != 200:
                raise ValueError(self._format_error(response))

            data = response.content
            if len(data) != chunk.size or not verify_checksum(data, chunk.checksum):
                raise IntegrityError(
                    f"Chunk {chunk.chunk_index + 1}/{len(manifest.chunks)} failed integrity check"
                )
            pieces.append(data)
            fetched += len(data)
            show_progress(label, fetched, manifest.size)

        payload = join(pieces)
        if len(payload) != manifest.size:
            raise IntegrityError(f"Reassembled {len(payload)} bytes, expected {manifest.size}")
        return payload

    def _resolve_output_path(self, output_path: Optional[str], filename: str) -> Path:
        if output_path:
            output_file = Path(output_path).expanduser()
            if output_file.is_dir():
                output_file = output_file / filename
        else:
            output_file = self.config.get_download_dir() / filename
        output_file.parent.mkdir(parents=True, exist_ok=True)
        return output_file

    def download(self, transfer_id: str, output_path: Optional[str] = None) -> str:
        """
        Download a transfer by fetching and reassembling its chunks locally.

        Args:
            transfer_id: Id of the transfer to download
            output_path: Optional output file or directory

        Returns:
            Success message with download details
        """
        try:
            headers = self._get_auth_header()
            manifest = self.get_manifest(transfer_id)
            payload = self._fetch_chunks(manifest, headers)
        except IntegrityError as e:
            clear_progress()
            logger.error(f"Integrity check failed for transfer {transfer_id}: {e}")
            return f"Error: {e}. Nothing was written."
        except (ValueError, ConnectionError) as e:
            clear_progress()
            return f"Error: {e}"

        finish_progress()
        try:
            output_file = self._resolve_output_path(output_path, os.path.basename(manifest.original_name))
            output_file.write_bytes(payload)
        except OSError as e:
            return f"Error writing file: {e}"

        logger.info(f"Downloaded transfer {transfer_id} to {output_file}")
        return (
            f"Downloaded: {manifest.original_name} ({format_file_size(len(payload))}, "
            f"{len(manifest.chunks)} chunk(s))\nSaved to: {output_file.absolute()}"
        )

    def delete(self, transfer_id: str) -> str:
        try:
            headers = self._get_auth_header()
        except ValueError as e:
            return f"Error: {e}"

        try:
            response = self._request_with_retry('DELETE', f'/transfers/{transfer_id}', headers=headers)
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"
        return f"Deleted transfer {transfer_id}."

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
