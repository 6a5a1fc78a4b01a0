"""Compatibility checks between a stack selection and a provider.

Two invalid combinations are handled differently on purpose: an unknown
provider or an unsupported framework aborts generation, while a provider
that needs a database in a project without one only skips the feature.
"""

from __future__ import annotations

from dataclasses import dataclass

from stackcast.scaffolder.models import ProjectConfig
from stackcast.scaffolder.providers import StackProvider, lookup
from stackcast.utils import print_warning


class ConfigurationError(Exception):
    """Raised when the stack selection cannot be scaffolded at all."""

    def __init__(self, message: str, provider_id: str = "") -> None:
        self.provider_id = provider_id
        super().__init__(message)


@dataclass(frozen=True)
class PrerequisiteUnmet:
    """A provider prerequisite the project does not satisfy. Not an error."""

    provider_id: str
    requirement: str
    message: str


@dataclass(frozen=True)
class Validation:
    provider: StackProvider
    unmet: PrerequisiteUnmet | None = None

    @property
    def should_skip(self) -> bool:
        return self.unmet is not None


def validate(config: ProjectConfig) -> Validation:
    """Validate ``config.auth_provider`` against the configured stack.

    Raises:
        ConfigurationError: The provider id is unknown, or the framework is
            not one the provider supports.
    """
    provider_id = config.auth_provider or ""
    provider = lookup(provider_id)
    if provider is None:
        raise ConfigurationError(f"Unknown auth provider: {provider_id}", provider_id=provider_id)

    if not provider.supports(config.framework):
        supported = ", ".join(provider.supported_frameworks)
        raise ConfigurationError(
            f"{provider.name} is not supported for {config.framework}. "
            f"Supported frameworks: {supported}",
            provider_id=provider_id,
        )

    if provider.requires_database and config.database == "none":
        message = f"{provider.name} requires a database. Please configure a database first."
        print_warning(message)
        return Validation(
            provider=provider,
            unmet=PrerequisiteUnmet(
                provider_id=provider.id.value, requirement="database", message=message
            ),
        )

    return Validation(provider=provider)
