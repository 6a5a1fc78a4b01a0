"""Command-line entry point.

Two commands are available::

    stackcast auth --config stack.yaml
    stackcast auth --name my-app --path ./my-app --framework next \\
        --database postgres --orm prisma --provider better-auth
    stackcast providers

Fatal errors are printed in red and exit with status 1. Recoverable errors
collected during the run are listed in a table and the command still exits 0.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any

import yaml
from pydantic import ValidationError
from rich.markup import escape

from stackcast import __version__
from stackcast.collector import ErrorCollector, error_collector
from stackcast.config import Settings
from stackcast.scaffolder.generator import AuthGenerator, GenerationCancelled
from stackcast.scaffolder.models import ProjectConfig
from stackcast.scaffolder.package_manager import PACKAGE_MANAGERS, InstallError
from stackcast.scaffolder.providers import AUTH_PROVIDERS, available_providers
from stackcast.scaffolder.validator import ConfigurationError
from stackcast.utils import console, print_error, print_info, print_summary_table, set_verbose

# Flags that map one-to-one onto ProjectConfig fields.
_CONFIG_FLAGS = {
    "name": "name",
    "path": "project_path",
    "framework": "framework",
    "backend": "backend",
    "database": "database",
    "orm": "orm",
    "styling": "styling",
    "provider": "auth_provider",
    "package_manager": "package_manager",
    "typescript": "typescript",
    "secure_passwords": "secure_passwords",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stackcast",
        description="stackcast -- stack-aware authentication scaffolding",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  stackcast auth --config stack.yaml\n"
            "  stackcast auth --name my-app --path ./my-app --framework next --provider auth.js\n"
            "  stackcast providers\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    auth = subparsers.add_parser("auth", help="Add an authentication provider to a project")
    auth.add_argument("--config", "-c", default=None, help="Stack file (YAML or JSON)")
    auth.add_argument("--name", default=None, help="Project name")
    auth.add_argument("--path", default=None, help="Project root directory")
    auth.add_argument("--framework", default=None, help="Frontend framework or server runtime")
    auth.add_argument("--backend", default=None, help="Separate backend (default: none)")
    auth.add_argument("--database", default=None, help="Database engine (default: none)")
    auth.add_argument("--orm", default=None, help="ORM (default: none)")
    auth.add_argument("--styling", default=None, help="Styling solution (default: css)")
    auth.add_argument(
        "--provider", default=None, choices=available_providers() + ["none"], help="Auth provider id"
    )
    auth.add_argument(
        "--package-manager",
        dest="package_manager",
        default=None,
        choices=sorted(PACKAGE_MANAGERS),
        help="Package manager used for installs (default: npm)",
    )
    auth.add_argument(
        "--no-typescript",
        dest="typescript",
        action="store_const",
        const=False,
        default=None,
        help="Generate JavaScript instead of TypeScript",
    )
    auth.add_argument(
        "--insecure-secrets",
        dest="secure_passwords",
        action="store_const",
        const=False,
        default=None,
        help="Write fixed placeholder secrets instead of random ones",
    )
    auth.add_argument(
        "--skip-install", action="store_true", help="Do not run the package manager"
    )
    auth.add_argument("--verbose", "-v", action="store_true", help="Print step-by-step progress")

    subparsers.add_parser("providers", help="List the available auth providers")
    return parser


def config_from_args(args: argparse.Namespace) -> ProjectConfig:
    """Build the ``ProjectConfig`` from a stack file, flags, or both.

    Flags override values read from ``--config``.
    """
    overrides: dict[str, Any] = {
        field: getattr(args, flag)
        for flag, field in _CONFIG_FLAGS.items()
        if getattr(args, flag) is not None
    }
    if args.config:
        return ProjectConfig.load(args.config, **overrides)
    return ProjectConfig(**overrides)


def run_auth(args: argparse.Namespace, settings: Settings, collector: ErrorCollector) -> int:
    """Run the ``auth`` command and return the process exit status."""
    try:
        config = config_from_args(args)
    except (OSError, ValueError, ValidationError, yaml.YAMLError) as exc:
        print_error(f"Error: invalid stack configuration: {escape(str(exc))}")
        return 1

    generator = AuthGenerator(settings, collector=collector, skip_install=args.skip_install)
    try:
        asyncio.run(generator.generate(config))
    except (ConfigurationError, InstallError, GenerationCancelled) as exc:
        print_error(f"Error: {escape(str(exc))}")
        return 1

    if generator.skipped is not None:
        print_info(f"Skipped authentication setup: {generator.skipped.message}")

    entries = collector.get_errors()
    if entries:
        print_summary_table(
            [(entry.task, escape(f"{entry.error} ({entry.kind})")) for entry in entries],
            title=f"{collector.error_count} error(s), {collector.warning_count} warning(s)",
            headers=("Task", "Problem"),
        )
    if settings.verbose and generator.written:
        print_summary_table(
            [(str(path.relative_to(config.project_path)), "written") for path in generator.written
             if path.is_relative_to(config.project_path)],
            title="Files",
            headers=("Path", "Status"),
        )
    return 0


def run_providers() -> int:
    print_summary_table(
        [
            (provider.id.value, f"{provider.name} ({', '.join(provider.supported_frameworks)})")
            for provider in AUTH_PROVIDERS.values()
        ],
        title="Auth providers",
        headers=("Id", "Provider (frameworks)"),
    )
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``python -m stackcast``."""
    args = build_parser().parse_args(argv)

    if args.command == "providers":
        sys.exit(run_providers())

    settings = Settings.from_env()
    if args.verbose:
        settings = settings.model_copy(update={"verbose": True})
    set_verbose(settings.verbose)
    error_collector.configure(settings.debug_errors, settings.debug_log_path)
    error_collector.clear()

    status = run_auth(args, settings, error_collector)
    if status == 0:
        console.print("[bold green]Done.[/bold green]")
    sys.exit(status)


if __name__ == "__main__":
    main()
