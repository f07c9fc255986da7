""".env file generation and loading for generated projects.

The initializer writes ``<project>/.env`` exactly once; the movie demo reads
it back and lets the process environment override individual values.
"""

from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values

from astradb_starter.core.settings import ProjectSettings

ENV_FILE_NAME = ".env"


# ============================================================================
# .env Generation
# ============================================================================


def render_env_file(settings: ProjectSettings) -> str:
    """Render settings as newline-joined ``KEY=VALUE`` lines.

    Key order is fixed by the credential shape; ``OPENAI_API_KEY`` is last
    and only present when a key was supplied. No trailing newline.

    Example:
        >>> render_env_file(ProjectSettings(EndpointConnectionConfig('E', 'T')))
        'ASTRA_DB_API_ENDPOINT=E\\nASTRA_DB_APPLICATION_TOKEN=T'
    """
    return "\n".join(f"{key}={value}" for key, value in settings.env_vars().items())


def write_env_file(project_dir: Path, settings: ProjectSettings) -> Path:
    """Write ``.env`` into a freshly created project directory.

    Returns:
        Path of the written file.
    """
    env_path = project_dir / ENV_FILE_NAME
    env_path.write_text(render_env_file(settings), encoding="utf-8")
    return env_path


# ============================================================================
# .env Loading
# ============================================================================


def read_env_file(env_path: Path) -> dict[str, str]:
    """Read variables from a ``.env`` file, skipping keys without a value."""
    if not env_path.exists():
        return {}
    return {
        key: value
        for key, value in dotenv_values(env_path).items()
        if value is not None
    }


def load_project_environ(
    project_dir: Path,
    environ: Mapping[str, str],
) -> dict[str, str]:
    """Merge ``<project>/.env`` with ``environ`` (``environ`` wins)."""
    merged = read_env_file(project_dir / ENV_FILE_NAME)
    merged.update({key: value for key, value in environ.items() if value})
    return merged
