"""Project layout classification.

Every path the generator writes to is derived here, once per run, from the
stack selection and the provider.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from stackcast.scaffolder.models import ProjectConfig
from stackcast.scaffolder.providers import AuthProviderId, StackProvider

# Backends that live inside the web app instead of a separate ``apps/api``.
EMBEDDED_BACKENDS = frozenset({"none", "next-api"})

# Frameworks that are themselves server runtimes.
BACKEND_FRAMEWORKS = frozenset({"express", "hono", "fastify", "node"})


@dataclass(frozen=True)
class Layout:
    is_monorepo: bool
    install_target: Path
    template_destination: Path
    env_dir: Path
    schema_path: Path
    database_assets_dir: Path
    web_lib_dir: Path
    api_auth_dir: Path
    components_dir: Path
    dashboard_dir: Path
    app_layout: Path


def is_monorepo(config: ProjectConfig) -> bool:
    return config.backend not in EMBEDDED_BACKENDS


def classify_layout(config: ProjectConfig, provider: StackProvider) -> Layout:
    root = config.project_path
    monorepo = is_monorepo(config)
    backend_framework = config.framework in BACKEND_FRAMEWORKS

    api_root = root / "apps" / "api"
    web_root = root / "apps" / "web" if monorepo else root

    if provider.server_side and (monorepo or backend_framework):
        install_target = api_root
    else:
        install_target = web_root

    return Layout(
        is_monorepo=monorepo,
        install_target=install_target,
        template_destination=root / _template_destination(config, provider, monorepo),
        env_dir=api_root if provider.id is AuthProviderId.BETTER_AUTH and monorepo else root,
        schema_path=(api_root if monorepo else root) / "prisma" / "schema.prisma",
        database_assets_dir=api_root if monorepo else root,
        web_lib_dir=web_root / "src" / "lib",
        api_auth_dir=api_root / "src" / "features" / "auth",
        components_dir=web_root / "src" / "components" / "auth",
        dashboard_dir=web_root / "src" / "app" / "dashboard",
        app_layout=web_root / "src" / "app" / "layout.tsx",
    )


def _template_destination(config: ProjectConfig, provider: StackProvider, monorepo: bool) -> str:
    if provider.server_side and monorepo:
        return "apps/api/src/features/auth"
    if config.framework in BACKEND_FRAMEWORKS:
        return "apps/api/src/features/auth" if monorepo else "src/features/auth"
    return "apps/web/src/lib" if monorepo else "src/lib"
