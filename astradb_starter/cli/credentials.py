"""Collect Astra DB and OpenAI credentials for a new project.

Priority, highest first: process environment, downloaded configuration
file, interactive prompt. Nothing is asked for that the environment already
supplies, so a fully configured environment runs without a terminal.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from astradb_starter.core.errors import MissingCredentialError
from astradb_starter.core.settings import (
    ASTRA_DB_API_ENDPOINT,
    ASTRA_DB_APPLICATION_TOKEN,
    ASTRA_DB_KEYSPACE,
    OPENAI_API_KEY,
    ConnectionConfig,
    EndpointConnectionConfig,
    ProjectSettings,
    connection_from_env,
    load_config_file,
)
from astradb_starter.helpers.prompts import Prompter

DEFAULT_CONFIG_FILE_NAME = "astradb-config.json"

SOURCE_MANUAL = "Enter API endpoint and token"
SOURCE_CONFIG_FILE = "Use downloaded configuration file"


def default_config_file_path() -> Path:
    """Where the Astra portal drops its configuration download."""
    return Path.home() / "Downloads" / DEFAULT_CONFIG_FILE_NAME


def prompt_connection_fields(
    environ: Mapping[str, str],
    prompter: Prompter,
) -> EndpointConnectionConfig:
    """Ask for the endpoint and token, each only if the environment lacks it."""
    api_endpoint = environ.get(ASTRA_DB_API_ENDPOINT) or prompter.text(
        "What is your Astra DB API endpoint?"
    )
    if not api_endpoint:
        raise MissingCredentialError(ASTRA_DB_API_ENDPOINT, "Input")

    token = environ.get(ASTRA_DB_APPLICATION_TOKEN) or prompter.password(
        "What is your Astra DB application token?"
    )
    if not token:
        raise MissingCredentialError(ASTRA_DB_APPLICATION_TOKEN, "Input")

    return EndpointConnectionConfig(
        api_endpoint=api_endpoint,
        application_token=token,
        keyspace=environ.get(ASTRA_DB_KEYSPACE) or None,
    )


def prompt_config_file(prompter: Prompter) -> ConnectionConfig:
    """Ask where the downloaded configuration file is and parse it."""
    path = prompter.existing_file(
        "Where is your downloaded Data API configuration file located?",
        default=default_config_file_path(),
    )
    return load_config_file(path)


def resolve_connection(
    environ: Mapping[str, str],
    prompter: Prompter,
) -> ConnectionConfig:
    """Return database credentials from the first source that has them."""
    connection = connection_from_env(environ)
    if connection is not None:
        return connection

    if environ.get(ASTRA_DB_API_ENDPOINT):
        return prompt_connection_fields(environ, prompter)

    source = prompter.select(
        "How do you want to provide your Astra DB credentials?",
        [SOURCE_MANUAL, SOURCE_CONFIG_FILE],
    )
    if source == SOURCE_CONFIG_FILE:
        return prompt_config_file(prompter)
    return prompt_connection_fields(environ, prompter)


def resolve_openai_api_key(
    environ: Mapping[str, str],
    prompter: Prompter,
) -> str | None:
    """Return the OpenAI key, or None when vector search is declined."""
    if environ.get(OPENAI_API_KEY):
        return environ[OPENAI_API_KEY]

    use_openai = prompter.confirm(
        "Do you want to enable vector search functionality "
        "(you will need a funded OpenAI account)?",
        default=True,
    )
    if not use_openai:
        return None

    return prompter.password("Awesome! What is your OpenAI API key?") or None


def resolve_settings(
    environ: Mapping[str, str],
    prompter: Prompter,
) -> ProjectSettings:
    """Resolve everything the new project's ``.env`` needs."""
    connection = resolve_connection(environ, prompter)
    openai_api_key = resolve_openai_api_key(environ, prompter)
    return ProjectSettings(connection=connection, openai_api_key=openai_api_key)
