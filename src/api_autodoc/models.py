"""Data models shared by extraction and rendering.

A recorded exchange is normalized into a ``Transaction`` no matter how it
was captured; declared parameters arrive as a tree of ``ParameterNode``.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from api_autodoc.extract.headers import canonicalize_headers

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

DEFAULT_HTTP_VERSION = "HTTP/1.1"

PARAMETER_TYPES = {
    "any",
    "string",
    "integer",
    "float",
    "boolean",
    "date",
    "datetime",
    "time",
    "file",
    "object",
    "list",
    "hash",
    "array",
}

CONTAINER_TYPES = {"hash", "array"}


class Transaction(BaseModel):
    """One captured request/response pair."""

    model_config = ConfigDict(frozen=True)

    method: HttpMethod
    path: str = Field(min_length=1)
    query_string: str = ""
    http_version: str = DEFAULT_HTTP_VERSION
    request_headers: dict[str, str] = {}
    request_body: bytes = b""
    request_content_type: str = ""
    response_status: int
    response_headers: dict[str, str] = {}
    response_body: bytes = b""
    response_content_type: str = ""
    controller: str | None = None  # only used for action-keyed registries
    action: str | None = None

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value):
        return value.upper() if isinstance(value, str) else value

    @field_validator("request_headers", "response_headers", mode="before")
    @classmethod
    def _canonical_headers(cls, value):
        return canonicalize_headers(value)

    @model_validator(mode="before")
    @classmethod
    def _content_type_from_headers(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for side in ("request", "response"):
            if not data.get(f"{side}_content_type"):
                headers = canonicalize_headers(data.get(f"{side}_headers"))
                data[f"{side}_content_type"] = headers.get("Content-Type", "")
        return data


class ParameterNode(BaseModel):
    """A declared parameter; ``hash`` and ``array`` nodes may nest children."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str | None = None  # absent for the root and for array elements
    type: str
    required: bool = False
    only: list[str] | None = None
    except_: list[str] | None = Field(default=None, alias="except")
    description: str | None = None
    comment: str | None = None
    children: tuple["ParameterNode", ...] = ()

    @field_validator("type")
    @classmethod
    def _known_type(cls, value: str) -> str:
        if value not in PARAMETER_TYPES:
            raise ValueError(f"unknown parameter type {value!r}")
        return value

    @model_validator(mode="after")
    def _leaves_have_no_children(self):
        if self.children and self.type not in CONTAINER_TYPES:
            raise ValueError(f"{self.type} parameter {self.key!r} cannot have children")
        return self


class ExampleMetadata(BaseModel):
    """The test example a transaction was recorded in."""

    description: str
    full_description: str = ""
    file_path: str


class Capture(BaseModel):
    """A transaction saved to disk together with its example."""

    example: ExampleMetadata
    transaction: Transaction
    description: str | None = None
