#!/usr/bin/env python3
"""
Console entry points.

    create-astradb-app      scaffold ./astradb-movies-app
    astradb-movies-demo     run the movie demo from inside a generated project
"""

from __future__ import annotations

import sys

import click

from astradb_starter.cli.init_project import PROJECT_DIR_NAME, initialize_project
from astradb_starter.core import demo_runner
from astradb_starter.core.errors import InstallError
from astradb_starter.helpers.helpers_logging import print_error


@click.command(
    name="create-astradb-app",
    help=(
        f"Create ./{PROJECT_DIR_NAME}, a ready-to-run Astra DB vector search "
        "demo. Credentials are read from ASTRA_DB_* / OPENAI_API_KEY "
        "environment variables or asked for interactively."
    ),
)
def _create_app_cli() -> int:
    initialize_project()
    return 0


def main() -> int:
    """Main entry point for ``create-astradb-app``."""
    try:
        result = _create_app_cli.main(
            args=sys.argv[1:],
            prog_name="create-astradb-app",
            standalone_mode=False,
        )
    except click.Abort:
        print("\n⚠️  Cancelled by user")
        return 130
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except InstallError as e:
        print_error(str(e))
        return e.returncode
    except Exception as e:
        print_error(str(e))
        return 1

    return 0 if result is None else int(result)


def demo_main() -> int:
    """Main entry point for ``astradb-movies-demo``."""
    return demo_runner.main()


if __name__ == "__main__":
    sys.exit(main())
