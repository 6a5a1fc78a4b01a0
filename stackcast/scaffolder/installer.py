"""Package selection and installation for a provider."""

from __future__ import annotations

from dataclasses import dataclass, field

from stackcast.scaffolder.layout import Layout
from stackcast.scaffolder.models import ProjectConfig
from stackcast.scaffolder.package_manager import Installer
from stackcast.scaffolder.providers import AuthProviderId, StackProvider
from stackcast.utils import print_verbose

# Database drivers Better Auth needs when no ORM owns the connection.
_BETTER_AUTH_DRIVERS: dict[str, tuple[str, str | None]] = {
    "postgres": ("pg", "@types/pg"),
    "mysql": ("mysql2", None),
    "sqlite": ("better-sqlite3", "@types/better-sqlite3"),
}


@dataclass
class PackageSelection:
    packages: list[str] = field(default_factory=list)
    dev_packages: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.packages or self.dev_packages)


def collect_packages(config: ProjectConfig, provider: StackProvider, layout: Layout) -> PackageSelection:
    """Runtime and dev packages *provider* needs for this stack."""
    # Auth.js in a monorepo is installed into the API app, so it takes the backend's packages.
    package_framework = (
        config.backend
        if provider.id is AuthProviderId.AUTHJS and layout.is_monorepo
        else config.framework
    )
    selection = PackageSelection(
        packages=provider.packages_for(package_framework),
        dev_packages=provider.dev_packages_for(package_framework),
    )

    if provider.id is AuthProviderId.AUTHJS:
        if config.orm == "drizzle":
            selection.packages.append("@auth/drizzle-adapter")
        if config.typescript and config.framework == "next":
            selection.dev_packages.append("@types/next-auth")

    elif provider.id is AuthProviderId.BETTER_AUTH:
        if config.orm == "none" and config.database in _BETTER_AUTH_DRIVERS:
            driver, types = _BETTER_AUTH_DRIVERS[config.database]
            selection.packages.append(driver)
            if types and config.typescript:
                selection.dev_packages.append(types)
        elif config.orm == "prisma":
            selection.packages.append("@prisma/client")
        elif config.orm == "typeorm":
            selection.packages.append("@hedystia/better-auth-typeorm")

    return selection


async def install_provider_packages(
    config: ProjectConfig,
    provider: StackProvider,
    layout: Layout,
    install: Installer,
) -> PackageSelection:
    """Install runtime packages, then dev packages, into ``layout.install_target``.

    The two calls are strictly sequential; either is skipped when its list
    is empty. :class:`~stackcast.scaffolder.package_manager.InstallError`
    propagates.
    """
    selection = collect_packages(config, provider, layout)
    if not selection:
        return selection

    print_verbose(f"Installing {provider.name} packages into {layout.install_target}")
    if selection.packages:
        await install(
            selection.packages,
            package_manager=config.package_manager,
            project_path=layout.install_target,
            dev=False,
            context="auth",
        )
    if selection.dev_packages:
        await install(
            selection.dev_packages,
            package_manager=config.package_manager,
            project_path=layout.install_target,
            dev=True,
            context="auth_dev",
        )
    return selection
