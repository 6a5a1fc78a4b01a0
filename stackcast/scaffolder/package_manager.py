"""Package-manager invocation.

Wraps ``npm``/``yarn``/``pnpm``/``bun`` behind a single async
:func:`install_dependencies` call that raises :class:`InstallError` on a
non-zero exit.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from stackcast.utils import print_success, print_verbose, print_warning, run_command


class InstallError(Exception):
    """Raised when the package manager exits with a non-zero code."""

    def __init__(self, message: str, command: str = "", returncode: int = 0, stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


@dataclass(frozen=True)
class PackageManagerConfig:
    id: str
    add_command: str
    dev_flag: str
    lock_file: str


PACKAGE_MANAGERS: dict[str, PackageManagerConfig] = {
    "npm": PackageManagerConfig(id="npm", add_command="install", dev_flag="--save-dev", lock_file="package-lock.json"),
    "yarn": PackageManagerConfig(id="yarn", add_command="add", dev_flag="--dev", lock_file="yarn.lock"),
    "pnpm": PackageManagerConfig(id="pnpm", add_command="add", dev_flag="--save-dev", lock_file="pnpm-lock.yaml"),
    "bun": PackageManagerConfig(id="bun", add_command="add", dev_flag="--dev", lock_file="bun.lockb"),
}


class Installer(Protocol):
    async def __call__(
        self,
        packages: list[str],
        *,
        package_manager: str,
        project_path: Path,
        dev: bool = False,
        context: str = "",
    ) -> None: ...


def get_package_manager_config(package_manager: str) -> PackageManagerConfig:
    """Configuration for *package_manager*; unknown managers fall back to npm."""
    config = PACKAGE_MANAGERS.get(package_manager)
    if config is None:
        print_warning(f"Unknown package manager: {package_manager}, falling back to npm")
        return PACKAGE_MANAGERS["npm"]
    return config


def build_install_command(packages: list[str], package_manager: str, dev: bool = False) -> list[str]:
    """The argv that adds *packages* with *package_manager*."""
    pm = get_package_manager_config(package_manager)
    cmd = [pm.id, pm.add_command, *packages]
    if dev:
        cmd.append(pm.dev_flag)
    if pm.id == "bun":
        # bun runs postinstall scripts without node on PATH and they fail.
        cmd.append("--ignore-scripts")
    return cmd


async def install_dependencies(
    packages: list[str],
    *,
    package_manager: str,
    project_path: Path,
    dev: bool = False,
    context: str = "",
    timeout: int = 600,
) -> None:
    """Add *packages* to the project at *project_path*.

    Args:
        packages: Package specs, e.g. ``["next-auth@beta"]``. Empty is a no-op.
        package_manager: ``npm``, ``yarn``, ``pnpm`` or ``bun``.
        project_path: Directory holding the target ``package.json``.
        dev: Install as development dependencies.
        context: Label used in progress output, e.g. ``"auth_dev"``.
        timeout: Seconds before the package manager is killed.

    Raises:
        InstallError: The package manager exited non-zero or timed out.
    """
    if not packages:
        return

    cmd = build_install_command(packages, package_manager, dev=dev)
    cmd_str = " ".join(cmd)
    label = f" ({context})" if context else ""
    print_verbose(f"Installing{label}: {cmd_str} in {project_path}")

    try:
        returncode, _stdout, stderr = await run_command(cmd, cwd=project_path, timeout=timeout)
    except OSError as exc:
        raise InstallError(f"Could not run {cmd[0]}: {exc}", command=cmd_str) from exc
    if returncode != 0:
        raise InstallError(
            f"Package installation failed (exit {returncode}): {cmd_str}\n{stderr}",
            command=cmd_str,
            returncode=returncode,
            stderr=stderr,
        )
    print_success(f"Installed {len(packages)} package(s) with {cmd[0]}{label}")
