"""Environment-variable-based configuration."""

import os

from libsql_http.errors import ConfigurationError


def get_url() -> str | None:
    """Return the database base URL from LIBSQL_URL."""
    return os.environ.get("LIBSQL_URL") or None


def get_auth_token() -> str | None:
    """Return the Bearer token from LIBSQL_AUTH_TOKEN."""
    return os.environ.get("LIBSQL_AUTH_TOKEN") or None


def get_connection_string() -> str:
    """Build ``<url>;<token>`` from LIBSQL_URL and LIBSQL_AUTH_TOKEN."""
    url = get_url()
    token = get_auth_token()
    if not url or not token:
        raise ConfigurationError(
            "LIBSQL_URL and LIBSQL_AUTH_TOKEN must both be set when no connection string is given."
        )
    return f"{url};{token}"


def get_timeout() -> float:
    """Return the default command timeout in seconds from LIBSQL_TIMEOUT."""
    return float(os.environ.get("LIBSQL_TIMEOUT", "30"))


def get_log_level() -> str:
    """Return the logging level from LIBSQL_LOG_LEVEL."""
    return os.environ.get("LIBSQL_LOG_LEVEL", "WARNING")
