"""Transaction sources.

A test may hand over its driver (a test client that exposes the last
request and response) or a transaction it already built. The caller picks
the matching source explicitly.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping

from pydantic import ValidationError

from api_autodoc.errors import MissingTransactionData
from api_autodoc.extract.headers import headers_from_environ
from api_autodoc.models import DEFAULT_HTTP_VERSION, Transaction

_MISSING = object()


class TransactionSource(ABC):
    """Supplies the transaction (and optional prose) for one document."""

    @abstractmethod
    def transaction(self) -> Transaction:
        ...

    def description(self) -> str | None:
        return None


class EmbeddedDriverSource(TransactionSource):
    """Reads the exchange from a test context exposing ``request()``/``response()``.

    The raw request carries WSGI environ style headers (``CONTENT_TYPE``,
    ``HTTP_X_API_KEY``, ...); only the fixed keys and the ``HTTP_`` prefixed
    ones are documented.
    """

    def __init__(self, context):
        self.context = context

    def transaction(self) -> Transaction:
        request = _call(self.context, "request")
        response = _call(self.context, "response")

        environ = getattr(request, "headers", None) or {}
        params = getattr(request, "params", None) or {}
        try:
            return Transaction(
                method=_require(request, "method", "request"),
                path=_require(request, "path", "request"),
                query_string=_as_text(getattr(request, "query_string", "")),
                http_version=environ.get("SERVER_PROTOCOL") or DEFAULT_HTTP_VERSION,
                request_headers=headers_from_environ(environ),
                request_body=_as_bytes(getattr(request, "body", None)),
                request_content_type=_as_text(getattr(request, "content_type", "")),
                response_status=_require(response, "status_code", "response"),
                response_headers=dict(getattr(response, "headers", None) or {}),
                response_body=_as_bytes(getattr(response, "body", None)),
                response_content_type=_as_text(getattr(response, "content_type", "")),
                controller=params.get("controller") if isinstance(params, Mapping) else None,
                action=params.get("action") if isinstance(params, Mapping) else None,
            )
        except ValidationError as e:
            field = ".".join(str(part) for part in e.errors()[0]["loc"]) or "transaction"
            raise MissingTransactionData(field, str(e)) from e

    def description(self) -> str | None:
        description = getattr(self.context, "description", None)
        if callable(description):
            description = description()
        return description or None


class PrebuiltTransactionSource(TransactionSource):
    """Wraps a transaction that was built (or loaded) ahead of time."""

    def __init__(self, transaction: Transaction, description: str | None = None):
        if transaction is None:
            raise MissingTransactionData("transaction")
        self._transaction = transaction
        self._description = description

    def transaction(self) -> Transaction:
        return self._transaction

    def description(self) -> str | None:
        return self._description


def _call(context, name: str):
    accessor = getattr(context, name, None)
    if not callable(accessor):
        raise MissingTransactionData(name, "test context has no such accessor")
    value = accessor()
    if value is None:
        raise MissingTransactionData(name, "test context returned nothing")
    return value


def _require(obj, name: str, owner: str):
    value = getattr(obj, name, _MISSING)
    if value is _MISSING or value is None:
        raise MissingTransactionData(f"{owner}.{name}")
    return value


def _as_bytes(body) -> bytes:
    if body is None:
        return b""
    if hasattr(body, "getvalue"):
        body = body.getvalue()
    if isinstance(body, str):
        return body.encode("utf-8")
    return bytes(body)


def _as_text(value) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value or ""
