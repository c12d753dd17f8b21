"""HTTP client for communicating with the storage server."""

import mimetypes
import os
import re
import sys
import time
import uuid
from pathlib import Path
from typing import Optional
from urllib.parse import unquote

import httpx

from common.logging_config import get_logger
from cli.config import Config
from cli.constants import GREEN, RESET
from cli.utils import format_file_size, format_timestamp

logger = get_logger(__name__)

_FILENAME_STAR_RE = re.compile(r"filename\*=(?:UTF-8|utf-8)''([^;]+)")
_FILENAME_RE = re.compile(r'filename="([^"]*)"')


def filename_from_disposition(header: Optional[str]) -> Optional[str]:
    """Extract the filename from a Content-Disposition header, if any."""
    if not header:
        return None
    match = _FILENAME_STAR_RE.search(header)
    if match:
        return unquote(match.group(1))
    match = _FILENAME_RE.search(header)
    if match:
        return match.group(1)
    return None


class StorageClient:
    """HTTP client for the storage API with retry logic and error handling."""

    def __init__(self, config: Config, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize storage client.

        Args:
            config: Configuration instance
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout(),
            transport=transport,
        )
        self.request_id = None
        logger.info(f"Initialized StorageClient [base_url={config.get_base_url()}]")

    def _new_request_headers(self) -> dict:
        self.request_id = str(uuid.uuid4())
        return {'X-Request-ID': self.request_id}

    def _backoff_delay(self, attempt: int) -> float:
        return self.config.get_retry_config()['retry_backoff_multiplier'] ** attempt

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
        if max_retries is None:
            max_retries = self.config.get_retry_config()['max_retries']

        kwargs.setdefault('headers', {}).update(self._new_request_headers())
        last_exception = None

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        for attempt in range(max_retries + 1):
            try:
                response = self.session.request(method, endpoint, **kwargs)
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                if attempt < max_retries:
                    delay = self._backoff_delay(attempt)
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s "
                        f"[request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue
                logger.error(
                    f"Network error (max retries exceeded): {method} {endpoint} error={e} "
                    f"[request_id={self.request_id}]"
                )
                break

            logger.debug(
                f"Response received: {method} {endpoint} status={response.status_code} "
                f"[request_id={self.request_id}]"
            )

            if response.status_code >= 500 and attempt < max_retries:
                delay = self._backoff_delay(attempt)
                logger.warning(
                    f"Server error (attempt {attempt + 1}/{max_retries + 1}): "
                    f"{method} {endpoint} status={response.status_code}, retrying in {delay}s "
                    f"[request_id={self.request_id}]"
                )
                time.sleep(delay)
                continue

            if 400 <= response.status_code < 500:
                logger.warning(
                    f"Client error: {method} {endpoint} status={response.status_code} "
                    f"[request_id={self.request_id}]"
                )
            return response

        raise self._connection_error(last_exception)

    @staticmethod
    def _connection_error(exc: Optional[Exception]) -> ConnectionError:
        if isinstance(exc, httpx.TimeoutException):
            return ConnectionError("Request timed out. Server may be overloaded.")
        if isinstance(exc, httpx.ConnectError):
            return ConnectionError("Cannot connect to storage server. Is it running?")
        return ConnectionError("Max retries exceeded")

    def _format_error(self, response: httpx.Response) -> str:
        """
        Map HTTP errors to user-friendly messages.

        Args:
            response: HTTP response object

        Returns:
            User-friendly error message
        """
        try:
            error_data = response.json()
            detail = error_data.get('detail', 'Unknown error')
            code = error_data.get('code', 'UNKNOWN')
        except ValueError:
            detail = response.text if response.text else 'Unknown error'
            code = 'UNKNOWN'

        error_messages = {
            'FILE_NOT_FOUND': 'File not found on server.',
            'BLOB_NOT_FOUND': 'File content is missing on the server.',
            'INVALID_UPLOAD': 'The server rejected the upload: no file was provided.',
            'MALFORMED_ARCHIVE': f'Not a valid backup archive: {detail}',
            'EMPTY_MANIFEST': 'The backup archive contains no file records.',
            'METADATA_WRITE_FAILED': 'The server could not save file metadata.',
        }

        if code in error_messages:
            return error_messages[code]

        status_messages = {
            400: 'Bad request',
            404: 'Not found',
            413: 'File too large',
            422: f'Invalid request: {detail}',
            500: 'Server error',
            503: 'Service unavailable',
        }

        message = status_messages.get(response.status_code, detail)
        return f"{message} (Code: {code})" if code != 'UNKNOWN' else message

    def _stream_to_file(self, endpoint: str, resolve_target, label: str) -> str:
        """
        Stream a GET response body into a local file with progress feedback.

        Retries connection failures and 5xx responses before any bytes are
        written.

        Args:
            endpoint: API endpoint path
            resolve_target: Callable taking the response and returning the output Path
            label: Noun used in the progress line

        Returns:
            Success or error message
        """
        max_retries = self.config.get_retry_config()['max_retries']
        headers = self._new_request_headers()
        last_exception = None

        for attempt in range(max_retries + 1):
            try:
                with self.session.stream(
                    'GET', endpoint, headers=headers, timeout=self.config.get_transfer_timeout()
                ) as response:
                    if response.status_code >= 500 and attempt < max_retries:
                        response.read()
                        delay = self._backoff_delay(attempt)
                        logger.warning(
                            f"Server error (attempt {attempt + 1}/{max_retries + 1}): GET {endpoint} "
                            f"status={response.status_code}, retrying in {delay}s"
                        )
                        time.sleep(delay)
                        continue

                    if response.status_code != 200:
                        response.read()
                        return f"Error: {self._format_error(response)}"

                    output_file = resolve_target(response)
                    output_file.parent.mkdir(parents=True, exist_ok=True)
                    total_size = int(response.headers.get('Content-Length', 0))
                    downloaded = 0

                    with open(output_file, 'wb') as f:
                        for chunk in response.iter_bytes(chunk_size=8192):
                            f.write(chunk)
                            downloaded += len(chunk)
                            if total_size > 0:
                                progress = (downloaded / total_size) * 100
                                sys.stdout.write(
                                    f"\rDownloading {label}: {format_file_size(downloaded)} / "
                                    f"{format_file_size(total_size)} ({GREEN}{progress:.1f}%{RESET})"
                                )
                            else:
                                sys.stdout.write(f"\rDownloading {label}: {format_file_size(downloaded)}")
                            sys.stdout.flush()

                    sys.stdout.write('\n')
                    sys.stdout.flush()
                    return (
                        f"Downloaded: {label} ({format_file_size(downloaded)})\n"
                        f"Saved to: {output_file.absolute()}"
                    )

            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                if attempt < max_retries:
                    delay = self._backoff_delay(attempt)
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): GET {endpoint} "
                        f"error={type(e).__name__}, retrying in {delay}s"
                    )
                    time.sleep(delay)
                    continue
            except IOError as e:
                return f"Error writing file: {e}"

        return f"Error: {self._connection_error(last_exception)}"

    def upload(self, file_path: str, tags: list[str]) -> str:
        """
        Upload one file with tags.

        The request is sent once; a failed upload is reported, not retried.

        Args:
            file_path: Local path of the file to upload
            tags: Tags to attach

        Returns:
            Formatted result message
        """
        path = Path(file_path).expanduser()
        if not path.exists():
            return f"Error: File not found: {file_path}"
        if not path.is_file():
            return f"Error: Not a file: {file_path}"

        filename = path.name
        content_type = mimetypes.guess_type(filename)[0] or 'application/octet-stream'

        try:
            with open(path, 'rb') as f:
                response = self.session.post(
                    '/api/upload',
                    files={'file': (filename, f, content_type)},
                    data={'tags': ','.join(tags)},
                    headers=self._new_request_headers(),
                    timeout=self.config.get_transfer_timeout(),
                )
        except httpx.ConnectError:
            return "Error: Cannot connect to storage server. Is it running?"
        except httpx.TimeoutException:
            return f"Error: Upload timed out (file size: {format_file_size(os.path.getsize(path))})"
        except IOError as e:
            return f"Error reading file: {e}"

        if response.status_code != 200:
            return f"Error uploading {file_path}: {self._format_error(response)}"

        record = response.json()['file']
        return (
            f"Uploaded: {record['filename']} "
            f"(ID: {record['id']}, "
            f"Size: {format_file_size(record['size'])}, "
            f"Tags: {', '.join(record['tags']) or '-'})"
        )

    def list_files(self, query: str = "") -> str:
        """
        List files newest first, optionally filtered by tag.

        Args:
            query: Tag to match; empty lists everything

        Returns:
            Formatted list of files
        """
        try:
            response = self._request_with_retry('GET', '/api/files', params={'q': query})
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        files = response.json()
        if not files:
            return f"No files found matching tag: {query}" if query else "No files stored."

        output = [f"Found {len(files)} file(s):\n"]
        for item in files:
            output.append(
                f"  - {item['filename']} (ID: {item['id']})\n"
                f"    Size: {format_file_size(item['size'])}\n"
                f"    Tags: {', '.join(item['tags'])}\n"
                f"    Created: {format_timestamp(item.get('created_at'))}"
            )
        return '\n'.join(output)

    def download(self, file_id: str, output_path: Optional[str] = None) -> str:
        """
        Download a file by id.

        Args:
            file_id: File id
            output_path: Optional target file or directory; defaults to the
                stored filename in the current directory

        Returns:
            Success or error message
        """
        def resolve_target(response: httpx.Response) -> Path:
            filename = filename_from_disposition(response.headers.get('Content-Disposition')) or file_id
            filename = Path(filename).name or file_id
            if not output_path:
                return Path(filename)
            target = Path(output_path).expanduser()
            if target.is_dir():
                return target / filename
            return target

        return self._stream_to_file(f'/api/files/{file_id}/download', resolve_target, file_id)

    def delete(self, file_id: str) -> str:
        """Delete a file by id."""
        try:
            response = self._request_with_retry('DELETE', f'/api/files/{file_id}')
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"
        return f"Deleted file {file_id}"

    def set_tags(self, file_id: str, tags: list[str]) -> str:
        """Replace the tags of a file."""
        try:
            response = self._request_with_retry(
                'PUT', f'/api/files/{file_id}', json={'tags': tags}
            )
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        record = response.json()
        return f"Updated {record['filename']}: tags [{', '.join(record['tags'])}]"

    def list_tags(self) -> str:
        """List every tag in use."""
        try:
            response = self._request_with_retry('GET', '/api/tags')
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        tags = response.json()
        if not tags:
            return "No tags in use."
        return '\n'.join(f"  - {tag}" for tag in tags)

    def backup(self, output_path: Optional[str] = None) -> str:
        """
        Download a backup archive of the whole store.

        Args:
            output_path: Optional target path; defaults to the server-suggested
                backup-YYYYMMDD-HHMMSS.zip in the current directory

        Returns:
            Success or error message
        """
        def resolve_target(response: httpx.Response) -> Path:
            if output_path:
                return Path(output_path).expanduser()
            suggested = filename_from_disposition(response.headers.get('Content-Disposition'))
            return Path(Path(suggested).name if suggested else 'backup.zip')

        return self._stream_to_file('/api/backup', resolve_target, 'backup')

    def restore(self, archive_path: str) -> str:
        """
        Restore a backup archive into the server.

        Sent exactly once: restore is not retried.

        Args:
            archive_path: Local path of the ZIP archive

        Returns:
            Summary of the restore
        """
        path = Path(archive_path).expanduser()
        if not path.is_file():
            return f"Error: Archive not found: {archive_path}"

        try:
            with open(path, 'rb') as f:
                response = self.session.post(
                    '/api/restore',
                    files={'file': (path.name, f, 'application/zip')},
                    headers=self._new_request_headers(),
                    timeout=self.config.get_transfer_timeout(),
                )
        except httpx.ConnectError:
            return "Error: Cannot connect to storage server. Is it running?"
        except httpx.TimeoutException:
            return "Error: Restore timed out. It may still be running on the server."
        except IOError as e:
            return f"Error reading archive: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        data = response.json()
        output = [
            f"{data['message']} ({data['inserted']} inserted, {data['updated']} updated)"
        ]
        if data['skipped_entries']:
            output.append("Skipped entries:")
            output.extend(f"  - {name}" for name in data['skipped_entries'])
        return '\n'.join(output)

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
