"""Template directory resolution.

A provider may ship framework-specific templates in a subdirectory named
after the framework; otherwise its generic directory is used.
"""

from __future__ import annotations

from dataclasses import dataclass

from stackcast.scaffolder.providers import StackProvider
from stackcast.scaffolder.templates import TemplateRenderer
from stackcast.utils import print_verbose


@dataclass(frozen=True)
class TemplateLocation:
    source_dir: str
    generic_dir: str
    framework_specific: bool


def resolve_template_location(
    renderer: TemplateRenderer,
    provider: StackProvider,
    framework: str,
    *,
    force_generic: bool = False,
) -> TemplateLocation:
    """Pick ``<provider dir>/<framework>`` when it exists, else the generic directory.

    Failing to list the provider directory is treated exactly like "no
    framework directory"; it is never an error.
    """
    generic_dir = provider.template_path
    try:
        subdirectories = renderer.list_subdirectories(generic_dir)
    except OSError as exc:
        print_verbose(f"No templates listed under {generic_dir}: {exc}")
        subdirectories = []

    if framework in subdirectories and not force_generic:
        return TemplateLocation(
            source_dir=f"{generic_dir}/{framework}",
            generic_dir=generic_dir,
            framework_specific=True,
        )
    return TemplateLocation(source_dir=generic_dir, generic_dir=generic_dir, framework_specific=False)
