"""Idempotent merging of generated content into existing project files.

Each artifact kind has its own policy:

========================  ===========================  ======================
Artifact                  Already applied when          Re-run behaviour
========================  ===========================  ======================
``.env``                  section heading present       untouched
``.env.example``          section heading present       untouched
``package.json`` scripts  (always applied)              keys overwritten
Prisma schema             sentinel models present       untouched
App layout                provider import present       untouched
========================  ===========================  ======================

The string-level functions are pure; the ``merge_*_file`` wrappers add the
file I/O and report a :class:`MergeOutcome`.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from stackcast.utils import ensure_dir, load_json, read_text_if_exists, write_json

ENV_SECTION_HEADING = "# Authentication Configuration"

ENV_PLACEHOLDER_VALUE = "your-value-here"

# Values containing either marker are already safe to commit.
_PLACEHOLDER_MARKERS = ("your-", "http://localhost")

_ENV_ASSIGNMENT = re.compile(r"^(?P<key>[A-Za-z_][A-Za-z0-9_]*)=(?P<value>.+)$", re.MULTILINE)

DB_SETUP_SCRIPTS: dict[str, str] = {
    "db:setup": "tsx scripts/setup-auth-db.ts",
    "db:setup:bun": "bun run scripts/setup-auth-db.ts",
}

SCHEMA_SENTINEL_MODELS = ("Account", "Session")
SCHEMA_PRIMARY_ENTITY = "User"


class MergeError(Exception):
    """An existing file could not be parsed, so the merge was not applied."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Cannot merge into {path}: {reason}")


class MergeOutcome(str, Enum):
    CREATED = "created"
    APPENDED = "appended"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class MergeTarget:
    path: Path
    block: str
    marker: str


# ---------------------------------------------------------------------------
# Env files
# ---------------------------------------------------------------------------


def append_block(existing: str | None, target: MergeTarget) -> tuple[str, MergeOutcome]:
    """Append ``target.block`` unless ``target.marker`` is already in *existing*."""
    if existing is None:
        return target.block, MergeOutcome.CREATED
    if target.marker in existing:
        return existing, MergeOutcome.UNCHANGED
    return existing + "\n\n" + target.block, MergeOutcome.APPENDED


def placeholder_env_block(block: str) -> str:
    """Replace every real ``KEY=value`` value in *block* with a placeholder.

    Values that already look like placeholders or local URLs are kept. Line
    and key order are preserved.
    """

    def _replace(match: re.Match[str]) -> str:
        value = match.group("value")
        if any(marker in value for marker in _PLACEHOLDER_MARKERS):
            return match.group(0)
        return f"{match.group('key')}={ENV_PLACEHOLDER_VALUE}"

    return _ENV_ASSIGNMENT.sub(_replace, block)


def merge_env_file(path: Path, block: str, marker: str = ENV_SECTION_HEADING) -> MergeOutcome:
    """Merge a rendered env block into ``.env`` at *path*."""
    return _merge_text_file(MergeTarget(path=path, block=block, marker=marker))


def merge_env_example_file(
    path: Path, block: str, marker: str = ENV_SECTION_HEADING
) -> MergeOutcome:
    """Merge the placeholder version of *block* into ``.env.example`` at *path*."""
    return _merge_text_file(MergeTarget(path=path, block=placeholder_env_block(block), marker=marker))


def _merge_text_file(target: MergeTarget) -> MergeOutcome:
    try:
        existing = read_text_if_exists(target.path)
    except UnicodeDecodeError as exc:
        raise MergeError(target.path, str(exc)) from exc
    content, outcome = append_block(existing, target)
    if outcome is not MergeOutcome.UNCHANGED:
        ensure_dir(target.path.parent)
        target.path.write_text(content, encoding="utf-8")
    return outcome


# ---------------------------------------------------------------------------
# package.json scripts
# ---------------------------------------------------------------------------


def set_scripts(manifest: dict, scripts: dict[str, str]) -> dict:
    """Return *manifest* with *scripts* set, other script entries untouched."""
    current = manifest.get("scripts")
    if not isinstance(current, dict):
        current = {}
    return {**manifest, "scripts": {**current, **scripts}}


def merge_package_scripts(
    path: Path, scripts: dict[str, str] | None = None
) -> MergeOutcome:
    """Set the database setup scripts in the ``package.json`` at *path*.

    The named keys are overwritten unconditionally. A missing manifest is
    skipped.

    Raises:
        MergeError: The manifest is not a JSON object.
    """
    if not path.exists():
        return MergeOutcome.SKIPPED
    try:
        manifest = load_json(path)
    except (json.JSONDecodeError, ValueError) as exc:
        raise MergeError(path, str(exc)) from exc

    write_json(set_scripts(manifest, scripts or DB_SETUP_SCRIPTS), path)
    return MergeOutcome.UPDATED


# ---------------------------------------------------------------------------
# Prisma schema
# ---------------------------------------------------------------------------


def _single_line_model(entity: str) -> re.Pattern[str]:
    # Only matches ``model X { ... }`` written on one line without nested
    # braces. Multi-line models are not detected and will coexist with the
    # appended block.
    return re.compile(rf"model {re.escape(entity)}[ \t]*\{{[^}}\n]*\}}")


def has_schema_models(schema: str, sentinels: tuple[str, ...] = SCHEMA_SENTINEL_MODELS) -> bool:
    return any(f"model {name}" in schema for name in sentinels)


def merge_schema_models(
    schema: str,
    models: str,
    *,
    sentinels: tuple[str, ...] = SCHEMA_SENTINEL_MODELS,
    primary_entity: str = SCHEMA_PRIMARY_ENTITY,
) -> tuple[str, MergeOutcome]:
    """Fold generated Prisma *models* into *schema* text."""
    if has_schema_models(schema, sentinels):
        return schema, MergeOutcome.UNCHANGED

    if f"model {primary_entity}" in schema:
        schema = _single_line_model(primary_entity).sub("", schema, count=1)
    return schema + "\n\n" + models, MergeOutcome.APPENDED


def merge_schema_file(path: Path, models: str) -> MergeOutcome:
    """Merge generated models into the Prisma schema at *path*.

    A missing schema is skipped.

    Raises:
        MergeError: The schema cannot be decoded as text.
    """
    try:
        schema = read_text_if_exists(path)
    except UnicodeDecodeError as exc:
        raise MergeError(path, str(exc)) from exc
    if schema is None:
        return MergeOutcome.SKIPPED

    updated, outcome = merge_schema_models(schema, models)
    if outcome is MergeOutcome.APPENDED:
        path.write_text(updated, encoding="utf-8")
    return outcome


# ---------------------------------------------------------------------------
# App layout
# ---------------------------------------------------------------------------

LAYOUT_PROVIDER = "AuthProvider"
LAYOUT_PROVIDER_IMPORT = 'import { AuthProvider } from "@/components/auth/AuthProvider";'
LAYOUT_SLOT = "{children}"

# One import statement, possibly spread over several lines.
_IMPORT_STATEMENT = re.compile(r"""^import\b[^;]*?["'][^"'\n]+["'];?""", re.MULTILINE)


def wrap_layout_with_provider(
    source: str,
    import_line: str = LAYOUT_PROVIDER_IMPORT,
    component: str = LAYOUT_PROVIDER,
) -> tuple[str, MergeOutcome]:
    """Import *component* into a layout module and wrap its children once.

    The import goes after the last existing import. The first ``{children}``
    inside ``<body>`` (or anywhere, when there is no ``<body>``) becomes
    ``<Component>{children}</Component>``.

    Raises:
        ValueError: The layout renders no ``{children}`` slot.
    """
    if component in source:
        return source, MergeOutcome.UNCHANGED

    slot = source.find(LAYOUT_SLOT, max(source.find("<body"), 0))
    if slot == -1:
        raise ValueError(f"no {LAYOUT_SLOT} slot to wrap")
    wrapped = f"<{component}>{LAYOUT_SLOT}</{component}>"
    source = source[:slot] + wrapped + source[slot + len(LAYOUT_SLOT):]

    imports = list(_IMPORT_STATEMENT.finditer(source))
    if imports:
        end = imports[-1].end()
        source = source[:end] + "\n" + import_line + source[end:]
    else:
        source = import_line + "\n\n" + source
    return source, MergeOutcome.UPDATED


def merge_layout_file(path: Path, import_line: str = LAYOUT_PROVIDER_IMPORT) -> MergeOutcome:
    """Wrap the app layout at *path* in the generated auth provider.

    A missing layout is skipped.

    Raises:
        MergeError: The layout cannot be decoded or has no children slot.
    """
    try:
        source = read_text_if_exists(path)
    except UnicodeDecodeError as exc:
        raise MergeError(path, str(exc)) from exc
    if source is None:
        return MergeOutcome.SKIPPED

    try:
        updated, outcome = wrap_layout_with_provider(source, import_line)
    except ValueError as exc:
        raise MergeError(path, str(exc)) from exc
    if outcome is MergeOutcome.UPDATED:
        path.write_text(updated, encoding="utf-8")
    return outcome
