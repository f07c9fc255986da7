"""Connection settings for Astra DB projects.

Two credential shapes are supported:

- **legacy**: database id + region + keyspace + token, as found in the
  configuration file downloaded from the Astra portal
  (``{"databaseId": ..., "region": ..., "keyspace": ..., "token": ...}``).
- **endpoint**: Data API endpoint + application token, as shown on the
  database overview page.

Both shapes resolve to an API endpoint the Data API client can use, and both
serialize to the same ``KEY=VALUE`` variables written into a project's
``.env`` file.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeAlias

import yaml

from astradb_starter.core.errors import ConfigFileError, MissingCredentialError

# Environment variable names, in the order they are written to .env
ASTRA_DB_ID = "ASTRA_DB_ID"
ASTRA_DB_REGION = "ASTRA_DB_REGION"
ASTRA_DB_KEYSPACE = "ASTRA_DB_KEYSPACE"
ASTRA_DB_API_ENDPOINT = "ASTRA_DB_API_ENDPOINT"
ASTRA_DB_APPLICATION_TOKEN = "ASTRA_DB_APPLICATION_TOKEN"
OPENAI_API_KEY = "OPENAI_API_KEY"

LEGACY_ENV_KEYS = (
    ASTRA_DB_ID,
    ASTRA_DB_REGION,
    ASTRA_DB_KEYSPACE,
    ASTRA_DB_APPLICATION_TOKEN,
)
ENDPOINT_ENV_KEYS = (ASTRA_DB_API_ENDPOINT, ASTRA_DB_APPLICATION_TOKEN)

# Field names used by the downloaded configuration file
LEGACY_FILE_FIELDS = ("databaseId", "region", "keyspace", "token")
ENDPOINT_FILE_FIELDS = ("apiEndpoint", "applicationToken")

_CONFIG_FILE_SOURCE = "Config file"
_ENVIRONMENT_SOURCE = "Environment"


@dataclass(frozen=True)
class LegacyConnectionConfig:
    """Database id / region / keyspace / token credentials."""

    database_id: str
    region: str
    keyspace: str
    token: str

    @property
    def api_endpoint(self) -> str:
        """Data API endpoint derived from the database id and region."""
        return f"https://{self.database_id}-{self.region}.apps.astra.datastax.com"

    @property
    def application_token(self) -> str:
        return self.token

    def env_vars(self) -> dict[str, str]:
        return {
            ASTRA_DB_ID: self.database_id,
            ASTRA_DB_REGION: self.region,
            ASTRA_DB_KEYSPACE: self.keyspace,
            ASTRA_DB_APPLICATION_TOKEN: self.token,
        }


@dataclass(frozen=True)
class EndpointConnectionConfig:
    """API endpoint / application token credentials.

    ``keyspace`` is read from ``ASTRA_DB_KEYSPACE`` when present but never
    written back; ``None`` means the database's default keyspace.
    """

    api_endpoint: str
    application_token: str
    keyspace: str | None = None

    def env_vars(self) -> dict[str, str]:
        return {
            ASTRA_DB_API_ENDPOINT: self.api_endpoint,
            ASTRA_DB_APPLICATION_TOKEN: self.application_token,
        }


ConnectionConfig: TypeAlias = LegacyConnectionConfig | EndpointConnectionConfig


@dataclass(frozen=True)
class ProjectSettings:
    """Everything a generated project needs to run the movie demo."""

    connection: ConnectionConfig
    openai_api_key: str | None = None

    @property
    def vector_search_enabled(self) -> bool:
        return bool(self.openai_api_key)

    def env_vars(self) -> dict[str, str]:
        """Return the ``.env`` variables in their fixed write order."""
        env = self.connection.env_vars()
        if self.openai_api_key:
            env[OPENAI_API_KEY] = self.openai_api_key
        return env

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> ProjectSettings:
        """Build settings from an environment mapping.

        Raises:
            MissingCredentialError: If neither credential set is complete.
                The first missing variable of the set the mapping appears
                to use is named.
        """
        connection = connection_from_env(environ)
        if connection is None:
            uses_legacy = bool(environ.get(ASTRA_DB_ID)) and not environ.get(
                ASTRA_DB_API_ENDPOINT
            )
            keys = LEGACY_ENV_KEYS if uses_legacy else ENDPOINT_ENV_KEYS
            missing = next(key for key in keys if not _is_present(environ.get(key)))
            raise MissingCredentialError(missing, _ENVIRONMENT_SOURCE)
        return cls(
            connection=connection,
            openai_api_key=environ.get(OPENAI_API_KEY) or None,
        )


# ============================================================================
# Resolution helpers
# ============================================================================


def _is_present(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _require_fields(
    data: Mapping[str, Any],
    fields: tuple[str, ...],
    source: str,
) -> list[str]:
    """Return the values of ``fields`` in order, raising on the first gap."""
    values: list[str] = []
    for field in fields:
        value = data.get(field)
        if not _is_present(value):
            raise MissingCredentialError(field, source)
        values.append(str(value).strip())
    return values


def has_complete_set(environ: Mapping[str, str], keys: tuple[str, ...]) -> bool:
    """True when every variable in ``keys`` is set to a non-empty value."""
    return all(_is_present(environ.get(key)) for key in keys)


def connection_from_env(environ: Mapping[str, str]) -> ConnectionConfig | None:
    """Return the credentials held by ``environ``, or None if incomplete.

    A complete legacy set wins over a complete endpoint set.
    """
    if has_complete_set(environ, LEGACY_ENV_KEYS):
        database_id, region, keyspace, token = _require_fields(
            environ, LEGACY_ENV_KEYS, _ENVIRONMENT_SOURCE
        )
        return LegacyConnectionConfig(database_id, region, keyspace, token)

    if has_complete_set(environ, ENDPOINT_ENV_KEYS):
        api_endpoint, token = _require_fields(
            environ, ENDPOINT_ENV_KEYS, _ENVIRONMENT_SOURCE
        )
        keyspace = environ.get(ASTRA_DB_KEYSPACE) or None
        return EndpointConnectionConfig(api_endpoint, token, keyspace)

    return None


def connection_from_config(data: Mapping[str, Any]) -> ConnectionConfig:
    """Validate a parsed configuration file field by field.

    Files carrying ``apiEndpoint`` are read as endpoint credentials, all
    others as legacy credentials.

    Raises:
        MissingCredentialError: Naming the first missing field.
    """
    if "apiEndpoint" in data:
        api_endpoint, token = _require_fields(
            data, ENDPOINT_FILE_FIELDS, _CONFIG_FILE_SOURCE
        )
        keyspace = data.get("keyspace")
        return EndpointConnectionConfig(
            api_endpoint,
            token,
            keyspace if _is_present(keyspace) else None,
        )

    database_id, region, keyspace, token = _require_fields(
        data, LEGACY_FILE_FIELDS, _CONFIG_FILE_SOURCE
    )
    return LegacyConnectionConfig(database_id, region, keyspace, token)


def load_config_file(path: Path) -> ConnectionConfig:
    """Parse a downloaded configuration file (JSON, or YAML by suffix).

    Raises:
        ConfigFileError: If the file cannot be read or is not a mapping.
        MissingCredentialError: If a required field is missing.
    """
    try:
        raw_text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(f"Cannot read config file {path}: {e}") from e

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data: object = yaml.safe_load(raw_text)
        else:
            data = json.loads(raw_text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigFileError(f"Config file {path} is not valid: {e}") from e

    if not isinstance(data, dict):
        raise ConfigFileError(f"Config file {path} must contain an object")

    return connection_from_config(data)
