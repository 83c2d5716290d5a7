"""Fetching and decoding remote slide images."""

import base64
import hashlib
import io
import logging
import threading
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import unquote_to_bytes

import requests
from PIL import Image

from .canvas import ImageResource
from .exceptions import ImageFetchError

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Outcome of an image fetch: either a resource or the reason it failed."""

    url: str
    resource: Optional[ImageResource] = None
    error: Optional[ImageFetchError] = None

    @property
    def ok(self) -> bool:
        return self.resource is not None


class ImageFetcher:
    """
    Downloads image bytes and validates that they decode.

    Without a caller-supplied session, each thread gets its own
    ``requests.Session``; ``close()`` closes every session created that way.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        user_agent: str = "deck-canvas/0.1",
    ):
        """
        Initialize the image fetcher.

        Args:
            timeout: Seconds before a connect or read gives up
            session: Optional requests session, used as-is by every thread and never closed here
            user_agent: User-Agent header sent with every request
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self._session = session
        if session is not None:
            session.headers.setdefault("User-Agent", user_agent)

        self._local = threading.local()
        self._owned_sessions: List[requests.Session] = []
        self._lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        """The caller-supplied session, or the current thread's own session."""
        if self._session is not None:
            return self._session

        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = self.user_agent
            self._local.session = session
            with self._lock:
                self._owned_sessions.append(session)
            logger.debug(f"Opened image session for thread {threading.current_thread().name}")
        return session

    def close(self) -> None:
        """Close the sessions this fetcher opened."""
        with self._lock:
            sessions, self._owned_sessions = self._owned_sessions, []
            self._local = threading.local()
        for session in sessions:
            session.close()
        if sessions:
            logger.debug(f"Closed {len(sessions)} image session(s)")

    def __enter__(self) -> "ImageFetcher":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def fetch(self, url: str) -> FetchResult:
        """
        Fetch and decode an image. Never raises.

        Args:
            url: http(s) URL or data: URI

        Returns:
            FetchResult carrying the decoded resource or the failure
        """
        try:
            data = self._read_bytes(url)
            resource = self._decode(url, data)
        except ImageFetchError as e:
            logger.warning(str(e))
            return FetchResult(url=url, error=e)

        logger.debug(f"Fetched image {url} ({resource.width}x{resource.height}, {len(resource.data)} bytes)")
        return FetchResult(url=url, resource=resource)

    def _read_bytes(self, url: str) -> bytes:
        if url.startswith("data:"):
            return self._read_data_uri(url)

        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ImageFetchError(url, str(e)) from e
        return response.content

    def _read_data_uri(self, url: str) -> bytes:
        header, sep, payload = url.partition(",")
        if not sep:
            raise ImageFetchError(url[:40], "malformed data URI")
        try:
            if header.endswith(";base64"):
                return base64.b64decode(payload, validate=True)
            return unquote_to_bytes(payload)
        except ValueError as e:
            raise ImageFetchError(url[:40], f"invalid data URI payload: {e}") from e

    def _decode(self, url: str, data: bytes) -> ImageResource:
        if not data:
            raise ImageFetchError(url, "empty response body")
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.verify()
            with Image.open(io.BytesIO(data)) as img:
                width, height = img.size
                image_format = img.format
        # DecompressionBombError is not an OSError.
        except Exception as e:
            raise ImageFetchError(url, f"undecodable image: {e}") from e

        return ImageResource(
            hash=hashlib.sha1(data).hexdigest(),
            data=data,
            width=width,
            height=height,
            format=image_format,
        )
