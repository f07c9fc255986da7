"""Exception hierarchy shared by the initializer and the movie demo."""


class StarterError(Exception):
    """Base class for every failure reported by astradb-starter."""


# ---------------------------------------------------------------------------
# Project initialization
# ---------------------------------------------------------------------------


class InitError(StarterError):
    """Raised when a new project cannot be initialized."""


class ConfigError(InitError):
    """Raised when the Astra DB credentials are incomplete or unreadable."""


class MissingCredentialError(ConfigError):
    """Raised when a required credential field is missing or empty."""

    def __init__(self, field: str, source: str = "Config file") -> None:
        super().__init__(f"{source} invalid, missing `{field}`")
        self.field = field
        self.source = source


class ConfigFileError(ConfigError):
    """Raised when the downloaded configuration file cannot be parsed."""


class TemplateCopyError(InitError):
    """Raised when the template files cannot be copied into the project."""


class InstallError(InitError):
    """Raised when the package install step exits with a non-zero code."""

    def __init__(self, returncode: int, message: str | None = None) -> None:
        super().__init__(
            message or f"Package install failed with exit code {returncode}"
        )
        self.returncode = returncode


# ---------------------------------------------------------------------------
# Demo runtime
# ---------------------------------------------------------------------------


class DemoError(StarterError):
    """Raised when the movie demo cannot complete a step."""


class DatabaseConnectionError(DemoError):
    """Raised when the Astra DB session cannot be established."""


class EmbeddingError(DemoError):
    """Raised when the embeddings service does not return a vector."""
