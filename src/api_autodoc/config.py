"""Configuration for document rendering and output."""

import logging
import re
from collections.abc import Callable
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from api_autodoc.errors import ConfigurationError
from api_autodoc.models import ExampleMetadata

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"

# ./tests/<kind>/<dirs>/test_<name>.py
_TEST_FILE = re.compile(r"^(?:\./)?tests/[^/]+/(?P<path>.+)\.py$")


def default_template() -> str:
    return (TEMPLATES_DIR / "document.md").read_text(encoding="utf-8")


def default_toc_template() -> str:
    return (TEMPLATES_DIR / "toc.md").read_text(encoding="utf-8")


def default_document_path(example: ExampleMetadata) -> str:
    """Map ``./tests/requests/users/test_show.py`` to ``users/show.md``."""
    match = _TEST_FILE.match(example.file_path)
    if match:
        *dirs, name = match.group("path").split("/")
    else:
        dirs, name = [], Path(example.file_path).stem
    name = name.removeprefix("test_").removesuffix("_test")
    return "/".join([*dirs, f"{name}.md"])


class Configuration(BaseModel):
    """Options recognized by the renderer and the documents writer."""

    template: str = Field(default_factory=default_template)
    toc_template: str = Field(default_factory=default_toc_template)
    suppressed_request_headers: set[str] = set()
    suppressed_response_headers: set[str] = set()
    document_path_from_example: Callable[[ExampleMetadata], str] | None = Field(default=None, exclude=True)
    output_root: Path = Path("doc")
    registry_key: Literal["route", "action"] = "route"
    include_query_in_path: bool = False
    toc: bool = False
    toc_filename: str = "toc.md"

    def document_path(self, example: ExampleMetadata) -> Path:
        mapping = self.document_path_from_example or default_document_path
        return self.output_root / mapping(example)


def load_configuration(file_path: Path) -> Configuration:
    """Load configuration values from a YAML file.

    ``template_path`` and ``toc_template_path`` are read relative to the
    configuration file and override ``template`` / ``toc_template``.
    """
    file_path = Path(file_path)
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"{file_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{file_path}: expected a mapping at the top level")

    for key, target in (("template_path", "template"), ("toc_template_path", "toc_template")):
        if key in data:
            template_file = file_path.parent / data.pop(key)
            try:
                data[target] = template_file.read_text(encoding="utf-8")
            except OSError as e:
                raise ConfigurationError(f"{file_path}: cannot read {key}: {e}") from e

    try:
        configuration = Configuration.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"{file_path}: {e}") from e
    logger.debug("Loaded configuration from %s", file_path)
    return configuration
