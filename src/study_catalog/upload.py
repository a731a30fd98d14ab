"""Relay of uploaded study files to the external processing service."""

from __future__ import annotations

import logging
from typing import BinaryIO, Optional

import httpx

from .config import CONFIG

logger = logging.getLogger('study_catalog.upload')

CHUNK_SIZE = 64 * 1024
SUCCESS_MESSAGE = "File uploaded successfully"


class _UnsizedReader:
    """Read-only view of a stream that hides its length.

    httpx sizes file parts through ``fileno``/``seek``/``tell``; without them
    the multipart body is sent with chunked transfer encoding instead of
    being measured or buffered.
    """

    def __init__(self, stream: BinaryIO, head: bytes = b''):
        self._stream = stream
        self._head = head

    def read(self, size: int = -1) -> bytes:
        if self._head:
            head, self._head = self._head, b''
            return head
        return self._stream.read(size)


class UploadRelay:
    def __init__(self, url: Optional[str] = None, client: Optional[httpx.Client] = None,
                 timeout: Optional[float] = None):
        self.url = CONFIG.upload.url if url is None else url
        self.timeout = CONFIG.upload.timeout if timeout is None else timeout
        # An injected client belongs to the caller and is left open
        self._client = client

    def relay(self, stream: Optional[BinaryIO], filename: Optional[str]) -> str:
        """Forward ``stream`` as the ``file`` part of a multipart POST.

        Returns a status message; failures are reported, never raised.
        """
        if not self.url:
            logger.warning("Upload relay called without EXTN_SERVER_SERVICE_URL")
            return "Upload service URL is not configured"
        try:
            if self._client is not None:
                return self._post(self._client, stream, filename)
            with httpx.Client(timeout=self.timeout) as client:
                return self._post(client, stream, filename)
        except Exception as e:
            logger.error(f"Upload of {filename} failed: {e}")
            return str(e)

    def _post(self, client: httpx.Client, stream: Optional[BinaryIO], filename: Optional[str]) -> str:
        files = []
        head = stream.read(CHUNK_SIZE) if stream is not None else b''
        if head:
            files.append(('file', (filename or 'upload', _UnsizedReader(stream, head), 'application/octet-stream')))
        response = client.post(self.url, files=files)
        if response.is_error:
            logger.warning(f"Upload of {filename} rejected with {response.status_code}")
            return response.text
        if response.status_code == httpx.codes.OK:
            logger.info(f"Relayed {filename} to processing service")
            return SUCCESS_MESSAGE
        return f"File upload failed: {response.status_code} {response.reason_phrase}"
