#!/usr/bin/env python3
"""
Initialize a new Astra DB movie demo project.

Creates ``astradb-movies-app/`` under the current directory, copies the
application template into it, writes the credentials to ``.env`` and
installs the project's requirements.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from collections.abc import Callable, Mapping
from pathlib import Path

import astradb_starter
from astradb_starter.cli.credentials import resolve_settings
from astradb_starter.core.errors import InstallError, TemplateCopyError
from astradb_starter.helpers.helpers_env import write_env_file
from astradb_starter.helpers.helpers_logging import (
    Colors,
    bold,
    print_header,
    print_info,
    print_success,
)
from astradb_starter.helpers.prompts import ClickPrompter, Prompter

PROJECT_DIR_NAME = "astradb-movies-app"
REQUIREMENTS_FILE = "requirements.txt"

Installer = Callable[[Path], None]


def get_template_dir() -> Path:
    """Return the application template shipped with the package."""
    package_root = Path(astradb_starter.__file__).resolve().parent
    return package_root / "templates" / "app"


def copy_template_files(template_dir: Path, project_dir: Path) -> None:
    """Copy the template into ``project_dir``, which must not exist yet.

    Files are copied into a hidden sibling staging directory first and
    renamed into place once complete, so a failed copy never leaves a
    directory that a later run would mistake for an initialized project.

    Raises:
        TemplateCopyError: If any file cannot be copied.
    """
    staging_dir = project_dir.with_name(f".{project_dir.name}.partial")

    try:
        if staging_dir.exists():
            shutil.rmtree(staging_dir)
        project_dir.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(
            template_dir,
            staging_dir,
            ignore=shutil.ignore_patterns("__pycache__", "*.pyc"),
        )
        staging_dir.rename(project_dir)
    except (OSError, shutil.Error) as e:
        shutil.rmtree(staging_dir, ignore_errors=True)
        raise TemplateCopyError(f"Error copying templates: {e}") from e


def run_install(project_dir: Path) -> None:
    """Install the project's requirements with pip, showing its output.

    Raises:
        InstallError: With pip's exit code when it fails.
    """
    cmd = [sys.executable, "-m", "pip", "install", "-r", REQUIREMENTS_FILE]
    try:
        result = subprocess.run(cmd, cwd=project_dir, check=False)
    except FileNotFoundError as e:
        raise InstallError(127, f"Cannot run package install: {e}") from e

    if result.returncode != 0:
        raise InstallError(result.returncode)


def print_already_exists(dir_name: str) -> None:
    print_info(
        "The project already exists. Delete it and re-run the command "
        "if you want to create a new one from scratch."
    )
    print_info("  " + bold(f"rm -rf {dir_name}"))


def print_next_steps(dir_name: str) -> None:
    astra = f"{Colors.BOLD}{Colors.RED}Astra DB{Colors.RESET}"
    print_info(f"""
-----

🎉 Congrats! You have successfully created a new {astra} vector search application!
👉 Next steps:
   1. Go to the newly created project folder.
      {bold(f"cd {dir_name}")}
   2. Run the sample code.
      {bold("python app.py")}
   3. Enjoy development!
      😍
""")


def initialize_project(
    target_dir_name: str = PROJECT_DIR_NAME,
    template_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
    prompter: Prompter | None = None,
    installer: Installer = run_install,
) -> bool:
    """Create and configure a new project directory.

    Args:
        target_dir_name: Directory to create, relative to the current
            working directory.
        template_dir: Template to copy (default: the packaged template).
        environ: Environment to read credentials from (default: os.environ).
        prompter: Source of interactive answers (default: terminal).
        installer: Runs the package install inside the new directory.

    Returns:
        True if the project was created, False if the directory already
        existed and nothing was touched.

    Raises:
        InitError: On missing credentials, copy failure or install failure.
    """
    project_dir = Path.cwd() / target_dir_name

    if project_dir.exists():
        print_already_exists(target_dir_name)
        return False

    settings = resolve_settings(
        os.environ if environ is None else environ,
        prompter or ClickPrompter(),
    )

    print_header(f"\n🚀 Creating {target_dir_name}...")
    copy_template_files(template_dir or get_template_dir(), project_dir)
    print_success(f"Copied application template into {target_dir_name}/")

    write_env_file(project_dir, settings)
    print_success("Created .env")

    installer(project_dir)

    print_next_steps(target_dir_name)
    return True
