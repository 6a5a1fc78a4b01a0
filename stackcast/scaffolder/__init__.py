"""stackcast scaffolder -- adds an authentication provider to a project.

Takes a ``ProjectConfig`` describing the stack (framework, backend, database,
ORM, package manager) and wires the chosen auth provider into the project
tree: packages, rendered source files, ``.env`` entries, package scripts and
Prisma models.

Quick usage::

    from stackcast.scaffolder import AuthGenerator, ProjectConfig

    config = ProjectConfig(
        name="my-app",
        project_path="/tmp/my-app",
        framework="next",
        database="postgres",
        auth_provider="auth.js",
    )
    await AuthGenerator().generate(config)
"""

from stackcast.scaffolder.generator import AuthGenerator, GenerationCancelled, GenerationState
from stackcast.scaffolder.merge import MergeError
from stackcast.scaffolder.models import GenerationContext, ProjectConfig
from stackcast.scaffolder.package_manager import InstallError
from stackcast.scaffolder.providers import AUTH_PROVIDERS, AuthProviderId, StackProvider
from stackcast.scaffolder.templates import TemplateIOError, TemplateRenderer
from stackcast.scaffolder.validator import ConfigurationError, PrerequisiteUnmet

__all__ = [
    "AUTH_PROVIDERS",
    "AuthGenerator",
    "AuthProviderId",
    "ConfigurationError",
    "GenerationCancelled",
    "GenerationContext",
    "GenerationState",
    "InstallError",
    "MergeError",
    "PrerequisiteUnmet",
    "ProjectConfig",
    "StackProvider",
    "TemplateIOError",
    "TemplateRenderer",
]
