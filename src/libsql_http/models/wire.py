"""Pipeline wire models: requests, tagged values and responses."""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field


class NullValue(BaseModel):
    """SQL NULL."""

    type: Literal["null"] = "null"
    name: str | None = None
    value: None = None


class IntegerValue(BaseModel):
    """64-bit integer, carried as a decimal string."""

    type: Literal["integer"] = "integer"
    name: str | None = None
    value: str


class FloatValue(BaseModel):
    """Double-precision float."""

    type: Literal["float"] = "float"
    name: str | None = None
    value: float


class TextValue(BaseModel):
    """UTF-8 text."""

    type: Literal["text"] = "text"
    name: str | None = None
    value: str


class BlobValue(BaseModel):
    """Binary data, Base64-encoded."""

    type: Literal["blob"] = "blob"
    name: str | None = None
    value: str


WireValue = Annotated[
    NullValue | IntegerValue | FloatValue | TextValue | BlobValue,
    Field(discriminator="type"),
]


class Statement(BaseModel):
    """SQL text with positional ``?N`` arguments."""

    sql: str
    args: list[WireValue] = Field(default_factory=list)


class ExecuteRequest(BaseModel):
    """Execute one statement."""

    type: Literal["execute"] = "execute"
    stmt: Statement


class CloseRequest(BaseModel):
    """Release the remote stream after the batch."""

    type: Literal["close"] = "close"


PipelineRequest = Annotated[ExecuteRequest | CloseRequest, Field(discriminator="type")]


class PipelineBody(BaseModel):
    """Body of a pipeline POST."""

    requests: list[PipelineRequest] = Field(default_factory=list)


class Column(BaseModel):
    """Column metadata from an execute result."""

    name: str | None = None
    decltype: str | None = None


class StatementResult(BaseModel):
    """Tabular result of one executed statement."""

    cols: list[Column] = Field(default_factory=list)
    rows: list[list[Any]] = Field(default_factory=list)
    affected_row_count: int = 0
    last_insert_rowid: str | None = None

    @property
    def first_cell(self) -> Any:
        """Raw first cell of the first row, or None."""
        if self.rows and self.rows[0]:
            return self.rows[0][0]
        return None


class StreamResponse(BaseModel):
    """Response to one pipeline request (``execute`` or ``close``)."""

    type: str
    result: StatementResult | None = None


class StreamError(BaseModel):
    """Error payload of a failed pipeline request."""

    message: str = ""
    code: str | None = None


class PipelineEntry(BaseModel):
    """One entry of the ``results`` array, in request order."""

    type: str | None = None
    response: StreamResponse | None = None
    error: StreamError | None = None

    @property
    def is_error(self) -> bool:
        """True when the server flagged this request as failed."""
        return self.type == "error" or self.error is not None

    @property
    def is_close(self) -> bool:
        """True for the response to a ``close`` request."""
        return self.response is not None and self.response.type == "close"

    @property
    def result(self) -> StatementResult | None:
        """The execute result, if this entry carries one."""
        if self.response is not None and self.response.type == "execute":
            return self.response.result
        return None


class PipelineResponse(BaseModel):
    """Parsed body of a pipeline POST."""

    baton: str | None = None
    base_url: str | None = None
    results: list[PipelineEntry]
