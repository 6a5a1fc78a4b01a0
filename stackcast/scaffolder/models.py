"""Pydantic models describing the stack to scaffold and the render context."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProjectConfig(BaseModel):
    """The caller's stack selection. Read-only inside the engine."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Project name (used in package and database names)")
    project_path: Path = Field(..., description="Root directory of the generated project")
    framework: str = Field(..., description="UI framework or backend runtime id, e.g. 'next'")
    backend: str = Field(default="none", description="Separate backend id, 'none' or 'next-api'")
    database: str = Field(default="none")
    orm: str = Field(default="none")
    styling: str = Field(default="css")
    typescript: bool = Field(default=True)
    package_manager: str = Field(default="npm")
    secure_passwords: bool = Field(
        default=True, description="Generate random secrets instead of fixed placeholders"
    )
    auth_provider: str | None = Field(default=None)

    @field_validator("project_path")
    @classmethod
    def _absolute_path(cls, value: Path) -> Path:
        return Path(value).expanduser().resolve()

    @field_validator("backend", "database", "orm", mode="before")
    @classmethod
    def _none_default(cls, value: Any) -> Any:
        if value is None or value == "":
            return "none"
        return value

    @classmethod
    def load(cls, path: str | Path, **overrides: Any) -> "ProjectConfig":
        """Load a stack file (YAML or JSON) and apply keyword overrides.

        A relative ``project_path`` inside the file is resolved against the
        file's directory.
        """
        file_path = Path(path)
        raw = file_path.read_text(encoding="utf-8")
        if file_path.suffix.lower() == ".json":
            data = json.loads(raw)
        else:
            data = yaml.safe_load(raw) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Stack file {file_path} must contain a mapping")

        data.update({k: v for k, v in overrides.items() if v is not None})
        project_path = data.get("project_path")
        if project_path is not None and not Path(project_path).is_absolute():
            data["project_path"] = file_path.parent / project_path
        return cls.model_validate(data)


class GenerationContext(ProjectConfig):
    """``ProjectConfig`` plus the derived fields every template can use."""

    provider_id: str
    provider_name: str
    auth_secret: str
    session_secret: str
    api_key: str
    database_url: str
    requires_database: bool
    backend_port: int = 3001

    def template_vars(self) -> dict[str, Any]:
        """Flatten the context into plain JSON-compatible template variables."""
        return self.model_dump(mode="json")
