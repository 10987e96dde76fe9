"""In-place rendering of helm value files.

Value files are Jinja2 templates using ``${{ ... }}`` for substitutions so
they do not collide with helm's own ``{{ ... }}`` templating. Unknown keys
render as empty text, letting a value file reference event fields that a
given deployment does not carry.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from jinja2 import ChainableUndefined, Environment, TemplateSyntaxError
from loguru import logger

from .errors import DeploymentError, TemplateFileMissingError


def get_template_env() -> Environment:
    """Get the Jinja2 environment used for value files."""
    return Environment(
        variable_start_string="${{",
        variable_end_string="}}",
        block_start_string="${%",
        block_end_string="%}",
        comment_start_string="${#",
        comment_end_string="#}",
        undefined=ChainableUndefined,
        keep_trailing_newline=True,
        autoescape=False,
        finalize=_finalize,
    )


def _finalize(value: Any) -> Any:
    # JSON spelling for event data: null is empty, booleans are lowercase
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def build_render_context(
    secrets: Any, deployment: Mapping[str, Any] | None
) -> dict[str, Any]:
    """Data exposed to value file templates."""
    return {"secrets": secrets, "deployment": deployment}


class ValueFileRenderer:
    """Renders a set of value files in place, concurrently."""

    def __init__(self, working_dir: Path | None = None) -> None:
        """Initialize the renderer.

        Args:
            working_dir: Base directory for relative paths (defaults to cwd)
        """
        self.working_dir = working_dir
        self.env = get_template_env()

    def render(self, paths: Iterable[str | Path], context: Mapping[str, Any]) -> None:
        """Render every file in ``paths`` with ``context``, overwriting it.

        Raises:
            TemplateFileMissingError: If any file does not exist
            DeploymentError: If any file is not a valid template
        """
        asyncio.run(self.render_async(paths, context))

    async def render_async(
        self, paths: Iterable[str | Path], context: Mapping[str, Any]
    ) -> None:
        """Async variant of ``render``; files are rendered in parallel threads."""
        files = [self._resolve(p) for p in paths]
        logger.debug(
            f"rendering value files [{','.join(str(f) for f in files)}] with: "
            f"{_describe(context)}"
        )
        await asyncio.gather(
            *(asyncio.to_thread(self._render_file, f, context) for f in files)
        )

    def _resolve(self, path: str | Path) -> Path:
        path = Path(path)
        if self.working_dir is not None and not path.is_absolute():
            return self.working_dir / path
        return path

    def _render_file(self, path: Path, context: Mapping[str, Any]) -> None:
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise TemplateFileMissingError(
                f"Value file not found: {path}", details=str(e)
            ) from e

        try:
            rendered = self.env.from_string(content).render(**context)
        except TemplateSyntaxError as e:
            raise DeploymentError(
                f"Invalid template in value file {path}: {e.message}",
                details=f"line {e.lineno}",
            ) from e

        path.write_text(rendered, encoding="utf-8")


def _describe(context: Mapping[str, Any]) -> str:
    # Secrets are never logged, only the keys they carry
    secrets = context.get("secrets")
    summary = {
        "secrets": sorted(secrets) if isinstance(secrets, Mapping) else "***",
        "deployment": context.get("deployment"),
    }
    return json.dumps(summary, default=str)
