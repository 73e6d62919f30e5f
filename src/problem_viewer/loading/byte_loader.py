"""
Module: loading.byte_loader

Purpose:
    Fetch a record's raw markup and decode it to text. Locators are either
    http(s) URLs (fetched with aiohttp) or paths relative to the index
    directory (read off the event loop).

Key Classes:
    - ByteLoader: async load(uri, encoding_hint) -> str

Errors:
    Every transport or file failure is re-raised as RecordLoadError so the
    ContentStore can mark the record FAILED instead of crashing.

Dependencies:
    - aiohttp: HTTP transport
    - asyncio (std): to_thread for file reads
    - loading.decoding: encoding policy

Used By:
    - search.content_store: injected loader
    - gui.main_window: session wiring
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import aiohttp

from problem_viewer.core.errors import RecordLoadError

from .decoding import decode_text

logger = logging.getLogger(__name__)

HTTP_SCHEMES = ("http", "https")
DEFAULT_TIMEOUT_S = 30.0


class ByteLoader:
    """
    Loader for record content.

    The aiohttp session is created lazily on the first HTTP fetch and must
    be closed with ``await loader.close()`` on the loop that created it.

    Example:
        >>> loader = ByteLoader(Path("site"))
        >>> text = await loader.load("posts/2025/tokyo_1.tex", "utf-8")
    """

    def __init__(
        self,
        base_dir: Path,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_dir = Path(base_dir)
        self.timeout_s = timeout_s
        self._session = session
        self._owns_session = session is None

    async def load(self, uri: str, encoding_hint: str = "auto") -> str:
        """
        Fetch and decode one locator.

        Raises:
            RecordLoadError: On any transport, HTTP status or file error
        """
        data = await self.load_bytes(uri)
        return decode_text(data, encoding_hint)

    async def load_bytes(self, uri: str) -> bytes:
        parsed = urlparse(uri)
        if parsed.scheme in HTTP_SCHEMES:
            return await self._fetch_http(uri)
        return await self._read_file(uri)

    def resolve_path(self, uri: str) -> Path:
        """Map a locator to a filesystem path (file:// or relative to base_dir)."""
        parsed = urlparse(uri)
        if parsed.scheme == "file":
            return Path(unquote(parsed.path))
        path = Path(uri)
        if path.is_absolute():
            return path
        return self.base_dir / path

    async def _read_file(self, uri: str) -> bytes:
        path = self.resolve_path(uri)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise RecordLoadError(uri, f"Cannot read {path} ({e.__class__.__name__})") from e

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_s)
            )
            self._owns_session = True
        return self._session

    async def _fetch_http(self, uri: str) -> bytes:
        session = self._get_session()
        try:
            async with session.get(uri, headers={"Cache-Control": "no-store"}) as response:
                if response.status != 200:
                    raise RecordLoadError(uri, f"HTTP {response.status}")
                return await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RecordLoadError(uri, f"Request failed ({e.__class__.__name__})") from e

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None
