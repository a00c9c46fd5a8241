"""HTTP transport: POST a request batch, return the parsed pipeline response."""

from __future__ import annotations

import asyncio
import json
import logging

import httpx
from pydantic import ValidationError

from libsql_http.db.connection_string import ConnectionString
from libsql_http.errors import OperationCanceledError, ProtocolError, TransportError
from libsql_http.models.wire import PipelineResponse
from libsql_http.pipeline.batch import RequestBatch
from libsql_http.pipeline.interpreter import PipelineReply

logger = logging.getLogger(__name__)


class HttpTransport:
    """Sends pipeline batches to the configured base URL.

    An ``http_client`` passed in is shared with the caller and never closed
    here. Without one, a client is created on first use and closed by
    ``aclose()``.
    """

    def __init__(
        self,
        connection_string: ConnectionString,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize with a parsed connection string and an optional shared client."""
        self._connection_string = connection_string
        self._http = http_client
        self._owns_client = http_client is None

    @property
    def url(self) -> str:
        """Base URL requests are posted to."""
        return self._connection_string.url

    def _get_client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient()
            self._owns_client = True
        return self._http

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._connection_string.token}",
            "Content-Type": "application/json",
        }

    async def post(self, batch: RequestBatch, *, timeout: float | None = None) -> PipelineReply:
        """POST one batch and validate the response.

        Raises TransportError for HTTP failures, non-2xx statuses and
        unreadable bodies, ProtocolError for embedded error entries or a
        missing ``results`` array, and OperationCanceledError when the
        awaiting task is cancelled mid-request.
        """
        request_body = batch.to_json()
        logger.debug(
            "POST %s: %d request(s) for %r", self._connection_string.display(), len(batch), batch.sql
        )

        client = self._get_client()
        try:
            resp = await client.post(
                self.url, content=request_body, headers=self._headers(), timeout=timeout
            )
        except asyncio.CancelledError as exc:
            raise OperationCanceledError(sql=batch.sql) from exc
        except httpx.HTTPError as exc:
            logger.warning("HTTP request to %s failed: %s", self.url, exc)
            raise TransportError(
                f"HTTP request failed: {exc}", sql=batch.sql, request_body=request_body
            ) from exc

        body = resp.text
        if not resp.is_success:
            logger.warning("HTTP request to %s returned %d", self.url, resp.status_code)
            raise TransportError(
                f"HTTP request failed with status code {resp.status_code}: {resp.reason_phrase}",
                sql=batch.sql,
                status_code=resp.status_code,
                response_body=body,
                request_body=request_body,
            )

        context = {
            "sql": batch.sql,
            "status_code": resp.status_code,
            "response_body": body,
            "request_body": request_body,
        }
        try:
            data = json.loads(body)
        except json.JSONDecodeError as exc:
            raise TransportError(f"Failed to parse JSON response: {exc}", **context) from exc

        if not isinstance(data, dict):
            raise ProtocolError("Invalid response format: expected a JSON object", **context)
        if data.get("error"):
            error = data["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise ProtocolError(f"Error in SQL execution: {message}", **context)
        if "results" not in data:
            raise ProtocolError("Invalid response format: missing 'results' property", **context)
        if isinstance(data["results"], dict):
            data["results"] = [data["results"]]

        try:
            response = PipelineResponse.model_validate(data)
        except ValidationError as exc:
            raise ProtocolError(f"Unexpected response format: {exc}", **context) from exc

        for index, entry in enumerate(response.results):
            if entry.is_error:
                message = entry.error.message if entry.error is not None else "unknown error"
                logger.info("Request %d of batch failed: %s", index, message)
                raise ProtocolError(f"Error in SQL execution: {message}", **context)

        return PipelineReply(
            response=response,
            body=body,
            request_body=request_body,
            status_code=resp.status_code,
        )

    async def aclose(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._http is not None and self._owns_client:
            await self._http.aclose()
        self._http = None
