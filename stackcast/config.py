"""stackcast configuration.

Typed settings for the scaffolding engine itself (not for the generated
project). All settings use Pydantic v2 models so they can be validated at
construction time and read from environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_TEMPLATE_ROOT = Path(__file__).parent / "scaffolder" / "templates"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


class Settings(BaseModel):
    """Engine-wide settings.

    Instances are typically created once by the CLI entry point and then
    passed to the generator.
    """

    template_root: Path = Field(default=DEFAULT_TEMPLATE_ROOT)
    verbose: bool = Field(default=False, description="Print step-by-step progress")
    debug_errors: bool = Field(
        default=False,
        description="Echo collected errors to stderr and append them to the debug log",
    )
    debug_dir: Path = Field(default=Path(".stackcast-debug"))
    install_timeout: int = Field(
        default=600, ge=10, description="Package-manager timeout in seconds"
    )

    @property
    def debug_log_path(self) -> Path:
        """Path to the persistent error log used in debug mode."""
        return self.debug_dir / "errors.log"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            STACKCAST_TEMPLATE_ROOT, STACKCAST_VERBOSE, STACKCAST_DEBUG_ERRORS
            (``DEBUG_ERRORS`` is accepted too), STACKCAST_DEBUG_DIR,
            STACKCAST_INSTALL_TIMEOUT.
        """
        kwargs: dict[str, object] = {
            "verbose": _env_flag("STACKCAST_VERBOSE"),
            "debug_errors": _env_flag("STACKCAST_DEBUG_ERRORS") or _env_flag("DEBUG_ERRORS"),
        }
        if os.environ.get("STACKCAST_TEMPLATE_ROOT"):
            kwargs["template_root"] = Path(os.environ["STACKCAST_TEMPLATE_ROOT"])
        if os.environ.get("STACKCAST_DEBUG_DIR"):
            kwargs["debug_dir"] = Path(os.environ["STACKCAST_DEBUG_DIR"])
        if os.environ.get("STACKCAST_INSTALL_TIMEOUT"):
            kwargs["install_timeout"] = int(os.environ["STACKCAST_INSTALL_TIMEOUT"])
        return cls(**kwargs)
