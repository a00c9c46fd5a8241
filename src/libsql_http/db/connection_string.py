"""Parsing and rendering of ``<baseUrl>;<bearerToken>`` connection strings."""

from __future__ import annotations

import httpx
from pydantic import BaseModel, ConfigDict, Field

from libsql_http.errors import ConfigurationError

_EXPECTED = "Expected format: '<baseUrl>;<bearerToken>'."


class ConnectionString(BaseModel):
    """Base URL plus Bearer token.

    The token may be written bare or as ``token=<value>``. ``libsql://``
    URLs are rewritten to ``https://``.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    token: str = Field(repr=False)

    @classmethod
    def parse(cls, text: str | None) -> ConnectionString:
        """Parse a connection string; raises ConfigurationError when malformed."""
        if text is None or not text.strip():
            raise ConfigurationError(f"Connection string cannot be empty. {_EXPECTED}")

        parts = text.strip().split(";")
        if len(parts) == 3 and not parts[2].strip():
            parts = parts[:2]
        if len(parts) != 2:
            raise ConfigurationError(
                f"Connection string must include both base address and Bearer token. {_EXPECTED}"
            )

        url = parts[0].strip().rstrip("/")
        token = parts[1].strip()
        if token.lower().startswith("token="):
            token = token[len("token="):].strip()

        if not url:
            raise ConfigurationError(f"Base address cannot be empty. {_EXPECTED}")
        if not token:
            raise ConfigurationError(f"Bearer token cannot be empty. {_EXPECTED}")

        if url.lower().startswith("libsql://"):
            url = "https://" + url[len("libsql://"):]
        try:
            scheme = httpx.URL(url).scheme
        except httpx.InvalidURL as exc:
            raise ConfigurationError(f"Invalid base address '{url}': {exc}") from exc
        if scheme not in ("http", "https"):
            raise ConfigurationError(
                f"Base address must be an absolute http(s) URL, got '{url}'. {_EXPECTED}"
            )
        return cls(url=url, token=token)

    def read_only(self) -> ConnectionString:
        """Same database with ``mode=ro`` appended to the URL query."""
        separator = "&" if "?" in self.url else "?"
        return self.model_copy(update={"url": f"{self.url}{separator}mode=ro"})

    def render(self) -> str:
        """Full ``<url>;<token>`` form, token included."""
        return f"{self.url};{self.token}"

    def display(self) -> str:
        """Loggable form with the token masked."""
        return f"{self.url};token=***"

    def __str__(self) -> str:
        return self.display()
