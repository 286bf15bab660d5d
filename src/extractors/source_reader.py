"""
Reads the static catalog sources from a local directory or over HTTP.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import httpx
from rich.console import Console

from config.settings import SourceConfig
from src.errors import SourceUnavailable

console = Console()


class SourceReader:
    """
    Fetches raw source text.

    With a base_url configured, files are requested with httpx (a non-2xx
    status is a failure); otherwise they are read from data_dir.
    Required sources raise SourceUnavailable, optional ones return None.
    """

    def __init__(
        self,
        source_config: Optional[SourceConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = source_config or SourceConfig()
        self._transport = transport  # for tests (httpx.MockTransport)
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        if self.config.base_url:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url.rstrip("/") + "/",
                timeout=self.config.timeout_seconds,
                follow_redirects=True,
                transport=self._transport,
                headers={"Cache-Control": "no-store"},
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def read_text(self, name: str, required: bool = True) -> Optional[str]:
        """
        Read one source as text.

        Args:
            name: Source file name (e.g. "base_products.csv")
            required: Raise instead of returning None when unavailable

        Returns:
            Decoded text, or None for an unavailable optional source
        """
        try:
            if self.config.base_url:
                return await self._fetch(name)
            return await asyncio.to_thread(self._read_file, name)
        except SourceUnavailable as e:
            if required:
                raise
            console.print(f"[yellow]Warning: {e} (continuing without it)[/yellow]")
            return None

    async def read_json(self, name: str, required: bool = False) -> Optional[Any]:
        """Read a JSON source. Malformed optional JSON is treated as unavailable."""
        text = await self.read_text(name, required=required)
        if text is None:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            if required:
                raise SourceUnavailable(name, reason=f"invalid JSON ({e.msg})") from e
            console.print(f"[yellow]Warning: {name} is not valid JSON, ignoring[/yellow]")
            return None

    async def read_many(self, names: dict[str, bool]) -> dict[str, Optional[str]]:
        """
        Read several text sources concurrently.

        Args:
            names: Mapping of source name -> required flag

        Returns:
            Mapping of source name -> text (None for missing optional sources)
        """
        keys = list(names)
        results = await asyncio.gather(
            *(self.read_text(name, required=names[name]) for name in keys),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return dict(zip(keys, results))

    def _read_file(self, name: str) -> str:
        path = Path(self.config.data_dir) / name
        try:
            # utf-8-sig drops a BOM left by spreadsheet exports
            return path.read_text(encoding="utf-8-sig")
        except FileNotFoundError as e:
            raise SourceUnavailable(name, reason="file not found") from e
        except (OSError, UnicodeDecodeError) as e:
            raise SourceUnavailable(name, reason=str(e)) from e

    async def _fetch(self, name: str) -> str:
        if self._client is None:
            raise RuntimeError("SourceReader must be used as an async context manager")
        try:
            response = await self._client.get(name)
        except httpx.HTTPError as e:
            raise SourceUnavailable(name, reason=str(e)) from e
        if not response.is_success:
            raise SourceUnavailable(name, status=response.status_code)
        return response.text.lstrip("\ufeff")
