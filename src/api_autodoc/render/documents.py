"""Collects rendered documents and writes them to the output tree."""

import logging
from pathlib import Path
from string import Template

from api_autodoc.config import Configuration
from api_autodoc.errors import TemplateError
from api_autodoc.render.document import RenderPass

logger = logging.getLogger(__name__)


class Documents:
    """Documents grouped by output file, in the order they were recorded."""

    def __init__(self, configuration: Configuration | None = None):
        self.configuration = configuration or Configuration()
        self._passes: list[RenderPass] = []
        self._rendered: list[str] = []

    def append(self, render_pass: RenderPass) -> str:
        markdown = render_pass.render()
        self._passes.append(render_pass)
        self._rendered.append(markdown)
        return markdown

    def __len__(self) -> int:
        return len(self._passes)

    def grouped(self) -> dict[Path, list[str]]:
        groups: dict[Path, list[str]] = {}
        for render_pass, markdown in zip(self._passes, self._rendered):
            groups.setdefault(render_pass.pathname, []).append(markdown)
        return groups

    def render_toc(self) -> str:
        root = self.configuration.output_root
        entries = []
        seen = set()
        for render_pass in self._passes:
            try:
                relative = render_pass.pathname.relative_to(root).as_posix()
            except ValueError:
                relative = render_pass.pathname.as_posix()
            link = f"{relative}#{render_pass.identifier}"
            if link in seen:
                continue
            seen.add(link)
            entries.append(f"* [{render_pass.title}]({link})")
        try:
            return Template(self.configuration.toc_template).substitute(entries="\n".join(entries))
        except (KeyError, ValueError) as e:
            raise TemplateError(f"invalid table of contents template: {e}") from e

    def write(self) -> list[Path]:
        """Write every output file (and the table of contents, if enabled)."""
        written = []
        for pathname, documents in self.grouped().items():
            pathname.parent.mkdir(parents=True, exist_ok=True)
            pathname.write_text("\n".join(documents), encoding="utf-8")
            logger.info("Wrote %d document(s) to %s", len(documents), pathname)
            written.append(pathname)

        if self.configuration.toc and self._passes:
            toc_path = self.configuration.output_root / self.configuration.toc_filename
            toc_path.parent.mkdir(parents=True, exist_ok=True)
            toc_path.write_text(self.render_toc(), encoding="utf-8")
            logger.info("Wrote table of contents to %s", toc_path)
            written.append(toc_path)
        return written
