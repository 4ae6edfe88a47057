"""Error Schemas: wire format of every failed response.

Invariants:
    - JSON field names are camelCase (fieldErrors); Python names are snake_case
    - timestamp serializes as an ISO-8601 instant
    - Models are frozen: a body is built once and never mutated
    - model_validate_json(body.model_dump_json(by_alias=True)) == body

Design Decisions:
    - Pydantic over hand-built dicts: the schema is also the parser used by tests
      and clients, so round-trip equality is checked by the model itself
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FieldErrorBody(BaseModel):
    """One field-level violation on the wire."""
    model_config = ConfigDict(frozen=True)

    field: str
    message: str


class ErrorResponseBody(BaseModel):
    """Structured error body. HTTP status line always matches `status`."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: int
    error: str
    message: str
    field_errors: list[FieldErrorBody] = Field(
        default_factory=list, alias="fieldErrors",
    )
    path: str
    timestamp: datetime
