"""Authentication scaffolding orchestrator.

Takes a ``ProjectConfig`` and adds the chosen authentication provider to the
project: installs its packages, renders its templates, and merges its
environment variables, package scripts and Prisma models into whatever the
project already has.

Failure policy:

* Validation and installation errors abort the run and propagate.
* Template copying, env merging and schema merging errors are printed,
  recorded in the error collector, and the run carries on.
* Common feature copies and the app layout integration run last and only
  record warnings.

Nothing is rolled back: files written before a fatal error stay on disk.
"""

from __future__ import annotations

import asyncio
import functools
from enum import Enum
from pathlib import Path
from typing import Awaitable

from jinja2 import TemplateError

from stackcast.collector import ErrorCollector, error_collector
from stackcast.config import Settings
from stackcast.scaffolder.context import build_context
from stackcast.scaffolder.installer import install_provider_packages
from stackcast.scaffolder.layout import Layout, classify_layout
from stackcast.scaffolder.merge import (
    MergeError,
    MergeOutcome,
    merge_env_example_file,
    merge_env_file,
    merge_layout_file,
    merge_package_scripts,
    merge_schema_file,
)
from stackcast.scaffolder.models import GenerationContext, ProjectConfig
from stackcast.scaffolder.package_manager import Installer, install_dependencies
from stackcast.scaffolder.providers import AuthProviderId, StackProvider
from stackcast.scaffolder.resolver import resolve_template_location
from stackcast.scaffolder.templates import (
    TemplateIOError,
    TemplateRenderer,
    output_name_for,
    skip_for_language,
)
from stackcast.scaffolder.validator import PrerequisiteUnmet, validate
from stackcast.utils import (
    print_panel,
    print_success,
    print_verbose,
    print_warning,
)

ENV_TEMPLATE = "auth/env-variables.j2"
COMMON_FEATURES_DIR = "common/features/auth"

_RECOVERABLE = (TemplateIOError, TemplateError, MergeError, OSError)


class GenerationState(str, Enum):
    NOT_STARTED = "not_started"
    VALIDATING = "validating"
    SKIPPED = "skipped"
    INSTALLING = "installing"
    TEMPLATE_COPYING = "template_copying"
    ENV_MERGING = "env_merging"
    SCHEMA_MERGING = "schema_merging"
    COMPLETED = "completed"


class GenerationCancelled(Exception):
    """Raised when cancellation is requested between two steps."""

    def __init__(self, state: GenerationState) -> None:
        self.state = state
        super().__init__(f"Generation cancelled before {state.value}")


class AuthGenerator:
    """Adds an authentication provider to a scaffolded project.

    One instance handles one run at a time. After :meth:`generate` returns,
    ``state`` holds the final state, ``skipped`` the unmet prerequisite (if
    the feature was skipped) and ``written`` every file the run created or
    changed.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        renderer: TemplateRenderer | None = None,
        install: Installer | None = None,
        collector: ErrorCollector | None = None,
        cancel_event: asyncio.Event | None = None,
        skip_install: bool = False,
    ) -> None:
        self.settings = settings or Settings()
        self.renderer = renderer or TemplateRenderer(self.settings.template_root)
        self.install: Installer = install or functools.partial(
            install_dependencies, timeout=self.settings.install_timeout
        )
        self.collector = collector or error_collector
        self.cancel_event = cancel_event
        self.skip_install = skip_install

        self.state = GenerationState.NOT_STARTED
        self.skipped: PrerequisiteUnmet | None = None
        self.written: list[Path] = []

    # -- Public API --------------------------------------------------------

    async def generate(self, config: ProjectConfig) -> None:
        """Run the full provider setup for *config*.

        Raises:
            ConfigurationError: Unknown provider or unsupported framework.
            InstallError: The package manager failed.
            GenerationCancelled: ``cancel_event`` was set between steps.
        """
        self.state = GenerationState.NOT_STARTED
        self.skipped = None
        self.written = []

        if not config.auth_provider or config.auth_provider == "none":
            return

        self._transition(GenerationState.VALIDATING)
        validation = validate(config)
        provider = validation.provider
        if validation.unmet is not None:
            self.skipped = validation.unmet
            self.state = GenerationState.SKIPPED
            return

        print_verbose(f"Setting up {provider.name} authentication...")
        if config.secure_passwords:
            print_verbose("Generating cryptographically secure secrets...")
        else:
            print_warning("Using default secrets. Remember to change them in production!")

        layout = classify_layout(config, provider)

        self._transition(GenerationState.INSTALLING)
        if not self.skip_install:
            await install_provider_packages(config, provider, layout, self.install)

        context = build_context(config, provider)

        self._transition(GenerationState.TEMPLATE_COPYING)
        await self._recoverable(
            "Auth template copy", self._copy_templates(context, provider, layout)
        )

        self._transition(GenerationState.ENV_MERGING)
        await self._recoverable("Auth env update", self._merge_env(context, layout))

        if config.orm == "prisma" and provider.requires_database:
            self._transition(GenerationState.SCHEMA_MERGING)
            await self._recoverable(
                "Prisma schema update", self._merge_schema(context, provider, layout)
            )

        await self._recoverable(
            "Auth common features",
            self._copy_common_features(context, layout),
            kind="warning",
        )
        if context.framework == "next":
            await self._recoverable(
                "Auth layout integration", self._integrate_layout(layout), kind="warning"
            )

        self._transition(GenerationState.COMPLETED)
        print_success(f"{provider.name} authentication setup complete!")
        show_next_steps(config, provider)

    # -- State handling ----------------------------------------------------

    def _transition(self, state: GenerationState) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise GenerationCancelled(state)
        self.state = state
        print_verbose(f"auth: {state.value}")

    async def _recoverable(self, task: str, step: Awaitable[None], kind: str = "error") -> None:
        try:
            await step
        except _RECOVERABLE as exc:
            print_warning(f"{task} failed: {exc}")
            if kind == "warning":
                self.collector.add_warning(task, exc)
            else:
                self.collector.add_error(task, exc)

    async def _render(self, template: str, destination: Path, ctx: dict) -> None:
        self.written.append(await self.renderer.render_to_file(template, destination, ctx))

    # -- Template copying --------------------------------------------------

    async def _copy_templates(
        self, context: GenerationContext, provider: StackProvider, layout: Layout
    ) -> None:
        ctx = context.template_vars()
        is_authjs = provider.id is AuthProviderId.AUTHJS
        next_with_backend = context.framework == "next" and layout.is_monorepo

        location = resolve_template_location(
            self.renderer,
            provider,
            context.framework,
            force_generic=is_authjs and next_with_backend,
        )
        if location.framework_specific:
            self.written.extend(
                await self.renderer.render_tree(location.source_dir, layout.template_destination, ctx)
            )

        if is_authjs and next_with_backend:
            await self._render_next_middleware(location.generic_dir, context, ctx)

        await self._render_generic_files(location.generic_dir, context, layout, ctx)

        if provider.server_side and context.backend != "none":
            await self._render_backend_routes(location.generic_dir, context, provider, layout, ctx)

        if is_authjs and context.database != "none" and context.orm == "none":
            await self._render_database_setup(location.generic_dir, layout, ctx)

    async def _render_generic_files(
        self, generic_dir: str, context: GenerationContext, layout: Layout, ctx: dict
    ) -> None:
        for template_name in self.renderer.list_files(generic_dir):
            file_name = output_name_for(template_name)
            if skip_for_language(file_name, context.typescript):
                continue
            if "db-connection" in file_name and context.orm != "none":
                continue

            # The auth client is frontend code; in a monorepo it belongs to the web app.
            if "auth-client" in file_name and layout.is_monorepo:
                destination = layout.web_lib_dir / file_name
            else:
                destination = layout.template_destination / file_name
            await self._render(f"{generic_dir}/{template_name}", destination, ctx)

    async def _render_next_middleware(
        self, generic_dir: str, context: GenerationContext, ctx: dict
    ) -> None:
        template = f"{generic_dir}/monorepo/middleware.ts.j2"
        if not self.renderer.exists(template):
            return
        destination = context.project_path / "apps" / "web" / "src" / "middleware.ts"
        if destination.exists():
            print_verbose("middleware.ts already exists, skipping")
            return
        await self._render(template, destination, ctx)

    async def _render_backend_routes(
        self,
        generic_dir: str,
        context: GenerationContext,
        provider: StackProvider,
        layout: Layout,
        ctx: dict,
    ) -> None:
        template = f"{generic_dir}/{context.backend}/routes.ts.j2"
        if not self.renderer.exists(template):
            print_warning(f"No {provider.name} route template found for {context.backend}")
            return
        await self._render(template, layout.api_auth_dir / "routes.ts", ctx)
        print_verbose(f"Created {provider.name} route handler for {context.backend}")

    async def _render_database_setup(self, generic_dir: str, layout: Layout, ctx: dict) -> None:
        target = layout.database_assets_dir

        migration = f"{generic_dir}/migrations/001_auth_tables.sql.j2"
        if self.renderer.exists(migration):
            await self._render(migration, target / "migrations" / "001_auth_tables.sql", ctx)

        setup_script = f"{generic_dir}/scripts/setup-auth-db.ts.j2"
        if not self.renderer.exists(setup_script):
            return
        await self._render(setup_script, target / "scripts" / "setup-auth-db.ts", ctx)

        manifest = target / "package.json"
        try:
            outcome = merge_package_scripts(manifest)
        except MergeError as exc:
            print_warning(str(exc))
            self.collector.add_error("package.json scripts", exc)
            return
        if outcome is MergeOutcome.UPDATED:
            self.written.append(manifest)
            print_verbose("Added db:setup scripts to package.json")

    async def _copy_common_features(self, context: GenerationContext, layout: Layout) -> None:
        if not self.renderer.exists(COMMON_FEATURES_DIR):
            return
        ctx = context.template_vars()
        targets = {
            "providers": layout.components_dir,
            "components": layout.components_dir / "components",
            "hooks": layout.components_dir / "hooks",
            "pages": layout.dashboard_dir,
        }
        for section, destination in targets.items():
            source = f"{COMMON_FEATURES_DIR}/{section}"
            if self.renderer.exists(source):
                self.written.extend(await self.renderer.render_tree(source, destination, ctx))

        # The App Router expects the route component to be called page.tsx.
        dashboard = layout.dashboard_dir / "Dashboard.tsx"
        if context.framework == "next" and dashboard.exists():
            page = dashboard.replace(layout.dashboard_dir / "page.tsx")
            self.written = [page if path == dashboard else path for path in self.written]

    # -- Merging -----------------------------------------------------------

    async def _merge_env(self, context: GenerationContext, layout: Layout) -> None:
        block = self.renderer.render(ENV_TEMPLATE, context.template_vars())

        env_path = layout.env_dir / ".env"
        outcome = await asyncio.to_thread(merge_env_file, env_path, block)
        self._record(env_path, outcome)

        example_path = layout.env_dir / ".env.example"
        outcome = await asyncio.to_thread(merge_env_example_file, example_path, block)
        self._record(example_path, outcome)

    async def _merge_schema(
        self, context: GenerationContext, provider: StackProvider, layout: Layout
    ) -> None:
        if not provider.server_side:
            return
        template = f"auth/prisma/{provider.template_dir}.prisma.j2"
        if not self.renderer.exists(template):
            return
        models = self.renderer.render(template, context.template_vars())

        outcome = await asyncio.to_thread(merge_schema_file, layout.schema_path, models)
        if outcome is MergeOutcome.SKIPPED:
            print_warning("Prisma schema not found. Skipping schema update.")
        elif outcome is MergeOutcome.UNCHANGED:
            print_verbose("Auth models already exist in Prisma schema")
        self._record(layout.schema_path, outcome)

    async def _integrate_layout(self, layout: Layout) -> None:
        outcome = await asyncio.to_thread(merge_layout_file, layout.app_layout)
        if outcome is MergeOutcome.SKIPPED:
            print_verbose("No app layout found, wrap your app in AuthProvider manually")
        elif outcome is MergeOutcome.UNCHANGED:
            print_verbose("AuthProvider already integrated in layout")
        self._record(layout.app_layout, outcome)

    def _record(self, path: Path, outcome: MergeOutcome) -> None:
        if outcome in (MergeOutcome.CREATED, MergeOutcome.APPENDED, MergeOutcome.UPDATED):
            self.written.append(path)
        print_verbose(f"{path.name}: {outcome.value}")


# ---------------------------------------------------------------------------
# Next steps
# ---------------------------------------------------------------------------


def next_steps(config: ProjectConfig, provider: StackProvider) -> list[str]:
    """Human follow-up actions after a successful setup."""
    steps: list[str] = []

    if provider.requires_database:
        if config.orm == "prisma":
            steps.append("Run 'npx prisma migrate dev' to create auth tables")
        elif config.orm == "drizzle":
            steps.append("Run 'npx drizzle-kit push' to create auth tables")
        elif config.database != "none" and config.orm == "none":
            steps.append("Run 'npm run db:setup' or 'bun run db:setup:bun' to create auth tables")

    steps.append("Update the environment variables in .env with your OAuth credentials")

    if provider.id is AuthProviderId.AUTHJS and config.framework == "next":
        steps.append(
            "Add the auth handlers to your API routes (see app/api/auth/[...nextauth]/route.ts)"
        )
    if provider.id is AuthProviderId.BETTER_AUTH:
        steps.append("Mount the auth API routes in your application")
    if config.framework != "next":
        steps.append("Wrap your app in AuthProvider from src/components/auth/AuthProvider")

    steps.append("Create sign-in and sign-up pages for your application")
    steps.append("Protect your routes using the auth middleware or hooks")
    return steps


def show_next_steps(config: ProjectConfig, provider: StackProvider) -> None:
    lines = [f"{number}. {step}" for number, step in enumerate(next_steps(config, provider), start=1)]
    if provider.docs_url:
        lines.extend(["", f"Documentation: {provider.docs_url}"])
    print_panel("\n".join(lines), title=f"Next steps for {provider.name}")
