"""Content-type driven body formatting.

Bodies are rendered as pretty JSON, reformatted XML, a content-type label
(for binary payloads) or the raw text. A body that cannot be rendered is
reported as absent (``None``) so no empty section ends up in the document.
"""

import json
import logging
from xml.dom import minidom
from xml.parsers.expat import ExpatError

from api_autodoc.errors import MalformedJsonBody, MalformedXmlBody

logger = logging.getLogger(__name__)

MULTIPART_FORM_DATA = "multipart/form-data"
JSON_TYPE = "application/json"


def format_request_body(body: bytes, content_type: str) -> str | None:
    """Format a request body: image, multipart, JSON, then raw text."""
    if not body:
        return None
    content_type = content_type or ""
    normalized = content_type.lower()
    label = _binary_label(content_type)
    if label is not None:
        return label
    if JSON_TYPE in normalized:
        try:
            return pretty_json(body)
        except MalformedJsonBody as e:
            logger.debug("Dropping request body: %s", e)
            return None
    return _text(body)


def format_response_body(body: bytes, content_type: str) -> str | None:
    """Format a response body: image, multipart, JSON (falling back to XML), XML, raw text."""
    if not body:
        return None
    content_type = content_type or ""
    normalized = content_type.lower()
    label = _binary_label(content_type)
    if label is not None:
        return label
    if JSON_TYPE in normalized:
        try:
            return pretty_json(body)
        except MalformedJsonBody as e:
            logger.debug("Response body is not JSON, trying XML: %s", e)
            return _xml_or_none(body)
    if "xml" in normalized:
        return _xml_or_none(body)
    return _text(body)


def pretty_json(body: bytes | str) -> str:
    """Re-serialize JSON with a stable two-space indentation."""
    try:
        data = json.loads(body)
    except (ValueError, TypeError) as e:
        raise MalformedJsonBody(str(e)) from e
    return json.dumps(data, indent=2, ensure_ascii=False)


def pretty_xml(body: bytes | str) -> str:
    """Strictly parse XML and re-serialize it with two-space indentation.

    The declaration keeps the source document's ``encoding`` and
    ``standalone`` values.
    """
    try:
        document = minidom.parseString(body)
    except (ExpatError, ValueError) as e:
        raise MalformedXmlBody(str(e)) from e
    _strip_blank_text(document.documentElement)
    encoding = document.encoding
    pretty = document.toprettyxml(indent="  ", encoding=encoding, standalone=document.standalone)
    if isinstance(pretty, bytes):
        pretty = pretty.decode(encoding)
    return pretty.rstrip()


def _binary_label(content_type: str) -> str | None:
    normalized = content_type.lower()
    if normalized.startswith("image/"):
        return content_type
    if normalized.startswith(MULTIPART_FORM_DATA):
        return MULTIPART_FORM_DATA
    return None


def _xml_or_none(body: bytes) -> str | None:
    try:
        return pretty_xml(body)
    except MalformedXmlBody as e:
        logger.debug("Dropping response body: %s", e)
        return None


def _strip_blank_text(node) -> None:
    # toprettyxml would otherwise keep the original indentation as text nodes;
    # whitespace in mixed content is data and stays
    texts = [child for child in node.childNodes if child.nodeType == child.TEXT_NODE]
    mixed = any(text.data.strip() for text in texts)
    for child in list(node.childNodes):
        if child.nodeType == child.TEXT_NODE:
            if not mixed and not child.data.strip():
                node.removeChild(child)
        elif child.hasChildNodes():
            _strip_blank_text(child)


def _text(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")
