"""Parameter declaration registries.

A registry maps an endpoint key to the root of its declared parameter
tree. Keys are either a route (HTTP method and path) or a controller and
action pair, depending on how the application declares its parameters.
"""

import logging
from pathlib import Path
from typing import NamedTuple, Protocol

import yaml
from pydantic import ValidationError

from api_autodoc.errors import ConfigurationError
from api_autodoc.models import ParameterNode

logger = logging.getLogger(__name__)


class RouteKey(NamedTuple):
    method: str
    path: str


class ActionKey(NamedTuple):
    controller: str
    action: str


class ValidatorRegistry(Protocol):
    def lookup(self, key: RouteKey | ActionKey) -> ParameterNode | None:
        ...


class InMemoryRegistry:
    """Registry backed by a dict; route keys may contain ``:id`` or ``{id}`` segments."""

    def __init__(self, entries: dict | None = None):
        self.entries: dict[RouteKey | ActionKey, ParameterNode] = {}
        for key, root in (entries or {}).items():
            self.register(key, root)

    def register(self, key: RouteKey | ActionKey, root: ParameterNode) -> None:
        if isinstance(key, RouteKey):
            key = RouteKey(key.method.upper(), key.path)
        self.entries[key] = root

    def lookup(self, key: RouteKey | ActionKey) -> ParameterNode | None:
        if isinstance(key, RouteKey):
            key = RouteKey(key.method.upper(), key.path)
        if key in self.entries:
            return self.entries[key]
        if isinstance(key, RouteKey):
            for candidate, root in self.entries.items():
                if (
                    isinstance(candidate, RouteKey)
                    and candidate.method == key.method
                    and route_matches(candidate.path, key.path)
                ):
                    return root
        return None


def route_matches(pattern: str, path: str) -> bool:
    """Match a declared route against a concrete request path."""
    pattern_segments = pattern.strip("/").split("/")
    path_segments = path.split("?", 1)[0].strip("/").split("/")
    if len(pattern_segments) != len(path_segments):
        return False
    for expected, actual in zip(pattern_segments, path_segments):
        if _is_placeholder(expected):
            if not actual:
                return False
        elif expected != actual:
            return False
    return True


def _is_placeholder(segment: str) -> bool:
    return segment.startswith(":") or (segment.startswith("{") and segment.endswith("}"))


def load_registry(file_path: Path) -> InMemoryRegistry:
    """Load parameter declarations from a YAML file.

    The file holds ``routes`` entries (``method``, ``path``, ``parameters``)
    and/or ``actions`` entries (``controller``, ``action``, ``parameters``).
    """
    text = Path(file_path).read_text(encoding="utf-8")
    try:
        doc = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"{file_path}: {e}") from e

    registry = InMemoryRegistry()
    try:
        for entry in doc.get("routes", []):
            key = RouteKey(entry["method"], entry["path"])
            registry.register(key, _root(entry))
        for entry in doc.get("actions", []):
            key = ActionKey(entry["controller"], entry["action"])
            registry.register(key, _root(entry))
    except (KeyError, TypeError, ValidationError) as e:
        raise ConfigurationError(f"{file_path}: invalid parameter declaration: {e}") from e

    logger.debug("Loaded %d parameter declarations from %s", len(registry.entries), file_path)
    return registry


def _root(entry: dict) -> ParameterNode:
    return ParameterNode(type="hash", children=entry.get("parameters") or [])
