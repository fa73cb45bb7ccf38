"""Document façade: turns one recorded exchange into Markdown."""

import logging
import re
import textwrap
from pathlib import Path
from string import Template
from urllib.parse import parse_qsl, unquote

from api_autodoc.config import Configuration
from api_autodoc.errors import MissingTransactionData, TemplateError
from api_autodoc.extract.headers import render_headers
from api_autodoc.extract.source import TransactionSource
from api_autodoc.models import ExampleMetadata, ParameterNode
from api_autodoc.registry import ActionKey, RouteKey, ValidatorRegistry
from api_autodoc.render.body import format_request_body, format_response_body
from api_autodoc.render.parameters import parameters_section, render_parameters

logger = logging.getLogger(__name__)

_DECLARED_ENDPOINT = re.compile(r"(GET|POST|PATCH|PUT|DELETE) ([^ ]+)")

FORM_TYPE = "application/x-www-form-urlencoded"


class Document:
    """Renders documents with a fixed configuration and parameter registry."""

    def __init__(self, configuration: Configuration | None = None, registry: ValidatorRegistry | None = None):
        self.configuration = configuration or Configuration()
        self.registry = registry

    def render(self, source: TransactionSource, example: ExampleMetadata) -> str:
        return self.prepare(source, example).render()

    def prepare(self, source: TransactionSource, example: ExampleMetadata) -> "RenderPass":
        return RenderPass(source, example, self.configuration, self.registry)

    def pathname(self, example: ExampleMetadata) -> Path:
        return self.configuration.document_path(example)


class RenderPass:
    """Every value bound into the template for one document.

    All values are computed up front; a missing method or path raises
    ``MissingTransactionData`` before anything is rendered.
    """

    def __init__(
        self,
        source: TransactionSource,
        example: ExampleMetadata,
        configuration: Configuration,
        registry: ValidatorRegistry | None = None,
    ):
        self.configuration = configuration
        self.example = example
        transaction = source.transaction()
        self.transaction = transaction

        self.method = transaction.method
        path = declared_path(example) or transaction.path
        if not path:
            raise MissingTransactionData("path")
        query = unquote(transaction.query_string)
        if configuration.include_query_in_path and query:
            self.path = f"{path}?{query}"
            self.request_query = ""
        else:
            self.path = path
            self.request_query = f"?{query}" if query else ""

        self.title = f"{self.method} {self.path}"
        self.identifier = identifier_for(self.title)
        self.description = describe(source.description(), example)
        self.pathname = configuration.document_path(example)

        self.request_http_version = transaction.http_version
        self.request_header = render_headers(
            transaction.request_headers, configuration.suppressed_request_headers
        )
        self.request_body = format_request_body(transaction.request_body, transaction.request_content_type)
        self.request_body_section = f"\n\n{self.request_body}" if self.request_body else ""

        self.response_http_version = transaction.http_version
        self.response_status = str(transaction.response_status)
        self.response_header = render_headers(
            transaction.response_headers, configuration.suppressed_response_headers
        )
        self.response_body = format_response_body(transaction.response_body, transaction.response_content_type)
        self.response_body_section = f"\n\n{self.response_body}" if self.response_body else ""

        root = self._lookup_parameters(registry)
        self.parameters = render_parameters(root)
        self.parameters_section = parameters_section(root)

        self.example_get_section = _example_section("GET", parse_qsl(transaction.query_string))
        if FORM_TYPE in transaction.request_content_type:
            form = parse_qsl(transaction.request_body.decode("utf-8", errors="replace"))
        else:
            form = []
        self.example_post_section = _example_section("POST", form)

    def values(self) -> dict[str, str]:
        return {
            "title": self.title,
            "identifier": self.identifier,
            "description": self.description,
            "method": self.method,
            "path": self.path,
            "request_query": self.request_query,
            "request_http_version": self.request_http_version,
            "request_header": self.request_header,
            "request_body": self.request_body or "",
            "request_body_section": self.request_body_section,
            "response_http_version": self.response_http_version,
            "response_status": self.response_status,
            "response_header": self.response_header,
            "response_body": self.response_body or "",
            "response_body_section": self.response_body_section,
            "parameters": self.parameters,
            "parameters_section": self.parameters_section,
            "example_get_section": self.example_get_section,
            "example_post_section": self.example_post_section,
        }

    def render(self) -> str:
        try:
            return Template(self.configuration.template).substitute(self.values())
        except KeyError as e:
            raise TemplateError(f"unknown template placeholder {e.args[0]!r}") from e
        except ValueError as e:
            raise TemplateError(f"invalid template: {e}") from e

    def _lookup_parameters(self, registry: ValidatorRegistry | None) -> ParameterNode | None:
        if registry is None:
            return None
        if self.configuration.registry_key == "action":
            if not (self.transaction.controller and self.transaction.action):
                return None
            key = ActionKey(self.transaction.controller, self.transaction.action)
        else:
            key = RouteKey(self.method, self.transaction.path)
        root = registry.lookup(key)
        if root is None:
            logger.debug("No parameters registered for %s", key)
        return root


def declared_path(example: ExampleMetadata) -> str | None:
    """The endpoint path named in the example, e.g. ``GET /users/:id``."""
    match = _DECLARED_ENDPOINT.search(example.full_description or "")
    return match.group(2) if match else None


def identifier_for(title: str) -> str:
    return re.sub(r"[:/]", "", title.replace(" ", "-")).lower()


def describe(text: str | None, example: ExampleMetadata) -> str:
    if text:
        return textwrap.dedent(text).strip("\n")
    return f"{example.description.capitalize()}."


def params_to_string(params: list[tuple[str, str]]) -> str:
    """Render parsed parameters as ``key=value`` pairs; repeated keys use ``key[]``."""
    counts: dict[str, int] = {}
    for key, _ in params:
        counts[key] = counts.get(key, 0) + 1
    pairs = []
    for key, value in params:
        if counts[key] > 1 and not key.endswith("[]"):
            key = f"{key}[]"
        pairs.append(f"{key}={value}")
    return "&".join(pairs)


def _example_section(method: str, params: list[tuple[str, str]]) -> str:
    if not params:
        return ""
    return f"\n### example {method}\n{params_to_string(params)}\n"


def render_document(
    source: TransactionSource,
    example: ExampleMetadata,
    configuration: Configuration | None = None,
    registry: ValidatorRegistry | None = None,
) -> str:
    return Document(configuration, registry).render(source, example)
