"""Exception types raised by the notification pipeline and its adapters."""

from typing import Optional


class SchemaWatchError(RuntimeError):
    """Base class for errors that end a pipeline invocation."""


class ConfigError(SchemaWatchError):
    """Raised when a repository config file is present but malformed."""

    @classmethod
    def missing_schema(cls, environment: str) -> "ConfigError":
        return cls(f"Environment '{environment}' does not define a schema path")

    @classmethod
    def invalid_env(cls) -> "ConfigError":
        return cls("'env' must be a mapping of environment name to settings")


class SchemaNotFoundError(SchemaWatchError):
    """Raised when the schema file does not exist at the requested revision."""

    def __init__(self, path: str, ref: str) -> None:
        self.path = path
        self.ref = ref
        super().__init__(f"Schema file {path} not found at {ref}")


class SchemaBuildError(SchemaWatchError):
    """Raised when a schema document cannot be built into a GraphQL schema."""

    def __init__(self, path: str, ref: str, reason: str) -> None:
        self.path = path
        self.ref = ref
        super().__init__(f"Failed to build schema {path}@{ref}: {reason}")


class GitHubAPIError(SchemaWatchError):
    """Raised when the GitHub REST API returns an error response."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int, url: str) -> "GitHubAPIError":
        return cls(f"GitHub API HTTP {status_code} for {url}", status_code=status_code)

    @classmethod
    def unreachable(cls, url: str, exc: Exception) -> "GitHubAPIError":
        return cls(f"GitHub API request to {url} failed: {exc}")


class DeliveryError(SchemaWatchError):
    """Raised by a channel sender when its notification was not accepted."""

    def __init__(self, channel: str, message: str, *, status_code: Optional[int] = None) -> None:
        self.channel = channel
        self.status_code = status_code
        super().__init__(f"{channel}: {message}")

    @classmethod
    def rejected(cls, channel: str, status_code: int, body: str) -> "DeliveryError":
        return cls(channel, f"returned status {status_code}: {body[:200]}", status_code=status_code)

    @classmethod
    def transport(cls, channel: str, exc: Exception) -> "DeliveryError":
        return cls(channel, f"request failed: {exc}")
