"""Header extraction, canonicalization and rendering."""

import re
from collections.abc import Iterable, Mapping

# Environ keys that are always worth documenting, regardless of prefix.
FIXED_KEYS = ("CONTENT_TYPE", "CONTENT_LENGTH", "LOCATION")

HTTP_PREFIX = "HTTP_"

_SEPARATORS = re.compile(r"[_-]")


def canonical_header_name(key: str) -> str:
    """Rewrite ``CONTENT_TYPE`` / ``x-api-key`` style names to ``Header-Case``."""
    segments = [s for s in _SEPARATORS.split(str(key)) if s]
    return "-".join(s.capitalize() for s in segments)


def canonicalize_headers(headers: Mapping | Iterable | None) -> dict[str, str]:
    """Canonicalize keys and drop headers with empty values."""
    if not headers:
        return {}
    items = headers.items() if isinstance(headers, Mapping) else headers
    table: dict[str, str] = {}
    for key, value in items:
        if value is None or str(value) == "":
            continue
        table[canonical_header_name(key)] = str(value)
    return table


def headers_from_environ(environ: Mapping) -> dict[str, str]:
    """Collect request headers from a WSGI-style environ.

    Merges the fixed keys with every ``HTTP_`` prefixed entry (prefix
    stripped), then canonicalizes the names.
    """
    table = {}
    for key, value in environ.items():
        name = str(key).upper().replace("-", "_")
        if name in FIXED_KEYS:
            table[name] = value
        elif name.startswith(HTTP_PREFIX):
            table[name[len(HTTP_PREFIX):]] = value
    return canonicalize_headers(table)


def render_headers(headers: Mapping[str, str], suppressed: Iterable[str] = ()) -> str:
    """Render ``Key: value`` lines, sorted, without the suppressed names."""
    hidden = {canonical_header_name(name) for name in suppressed}
    lines = [
        f"{key}: {value}"
        for key, value in canonicalize_headers(headers).items()
        if key not in hidden
    ]
    return "\n".join(sorted(lines))
