"""Jinja2 template rendering for provider scaffolding.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``stackcast/scaffolder/templates/`` directory (or any other template root)
and renders them with a generation context. Supports single-file rendering,
tree rendering with language-aware filtering, and directory listing for
template resolution.
"""

from __future__ import annotations

import asyncio
import re
import shutil
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from stackcast.config import DEFAULT_TEMPLATE_ROOT
from stackcast.utils import ensure_dir

TEMPLATE_SUFFIX = ".j2"

_TS_SUFFIXES = (".ts", ".tsx")
_JS_SUFFIXES = (".js", ".jsx")


class TemplateIOError(Exception):
    """Raised when a template directory or file is missing or unreadable."""


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates into a project directory.

    Template paths are always relative to the template root and use forward
    slashes, e.g. ``"auth/authjs/next/auth.ts.j2"``.
    """

    def __init__(self, template_root: str | Path | None = None) -> None:
        if template_root is None:
            template_root = DEFAULT_TEMPLATE_ROOT
        self.template_root = Path(template_root)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_root)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["slugify"] = _slugify_filter
        self.env.filters["pascal_case"] = _pascal_case_filter

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context."""
        template = self.env.get_template(template_path)
        return template.render(**context)

    # -- File-based rendering (async) --------------------------------------

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.

        Raises:
            TemplateIOError: The template does not exist.
        """
        if not self.exists(template_path):
            raise TemplateIOError(f"Template file not found: {self.template_root / template_path}")
        content = self.render(template_path, context)
        out = Path(output_path)
        await asyncio.to_thread(_write_file, out, content)
        return out

    async def render_tree(
        self,
        source_dir: str,
        output_dir: str | Path,
        context: dict[str, Any],
        *,
        overwrite: bool = True,
    ) -> list[Path]:
        """Render every file under *source_dir* into *output_dir*.

        ``.j2`` files are rendered with the suffix stripped, anything else is
        copied verbatim, and a leading ``_`` in a file name becomes ``.``.
        TypeScript sources are skipped when ``context["typescript"]`` is
        false, JavaScript sources when it is true.

        Returns:
            List of written file paths.

        Raises:
            TemplateIOError: *source_dir* does not exist under the template root.
        """
        source_path = self.template_root / source_dir
        if not source_path.is_dir():
            raise TemplateIOError(f"Template directory not found: {source_path}")

        typescript = bool(context.get("typescript", True))
        out_base = Path(output_dir)
        written: list[Path] = []

        for template_file in sorted(source_path.rglob("*")):
            if not template_file.is_file():
                continue
            rel = template_file.relative_to(source_path)
            output_name = output_name_for(rel.name)
            if skip_for_language(output_name, typescript):
                continue

            output_file = out_base / rel.parent / output_name
            if not overwrite and output_file.exists():
                continue

            if template_file.name.endswith(TEMPLATE_SUFFIX):
                template_key = f"{source_dir}/{rel.as_posix()}"
                written.append(await self.render_to_file(template_key, output_file, context))
            else:
                await asyncio.to_thread(_copy_file, template_file, output_file)
                written.append(output_file)

        return written

    # -- Template store queries ---------------------------------------------

    def exists(self, path: str) -> bool:
        """Whether *path* (file or directory) exists under the template root."""
        return (self.template_root / path).exists()

    def list_subdirectories(self, path: str) -> list[str]:
        """Names of the immediate subdirectories of *path*.

        Raises:
            OSError: The directory is missing or cannot be read.
        """
        return sorted(entry.name for entry in (self.template_root / path).iterdir() if entry.is_dir())

    def list_files(self, path: str) -> list[str]:
        """Names of the template files directly inside *path* (no recursion)."""
        directory = self.template_root / path
        if not directory.is_dir():
            return []
        return sorted(
            entry.name
            for entry in directory.iterdir()
            if entry.is_file() and entry.name.endswith(TEMPLATE_SUFFIX)
        )


# ---------------------------------------------------------------------------
# Naming rules
# ---------------------------------------------------------------------------


def output_name_for(template_name: str) -> str:
    """Map a template file name to the name it is written under."""
    name = template_name[: -len(TEMPLATE_SUFFIX)] if template_name.endswith(TEMPLATE_SUFFIX) else template_name
    if name.startswith("_"):
        name = "." + name[1:]
    return name


def skip_for_language(output_name: str, typescript: bool) -> bool:
    """Whether a rendered file belongs to the other language variant."""
    if typescript:
        return output_name.endswith(_JS_SUFFIXES)
    return output_name.endswith(_TS_SUFFIXES)


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------


def _slugify_filter(value: str) -> str:
    """Convert a string to a URL/filename-safe slug."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower().strip())
    return slug.strip("-")


def _pascal_case_filter(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``SomeThing``."""
    parts = re.split(r"[-_.\s]+", value)
    return "".join(word.capitalize() for word in parts if word)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    ensure_dir(path.parent)
    path.write_text(content, encoding="utf-8")


def _copy_file(source: Path, destination: Path) -> None:
    ensure_dir(destination.parent)
    shutil.copyfile(source, destination)
