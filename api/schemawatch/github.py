"""GitHub REST loaders for schema files and repository config."""

import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import httpx
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from schemawatch.errors import GitHubAPIError, SchemaNotFoundError
from schemawatch.sources import SchemaPointer

logger = logging.getLogger(__name__)

YAML_VERSION = (1, 2)


@dataclass(frozen=True)
class GitHubContentsConfig:
    api_url: str = "https://api.github.com"
    token: str = ""
    config_path: str = ".github/schemawatch.yml"
    timeout: float = 10


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml


def parse_config(text: str, source: str = "config") -> Optional[dict[str, Any]]:
    """Parse config YAML; unreadable or non-mapping documents yield ``None``."""
    try:
        loaded = _yaml().load(text)
    except YAMLError as exc:
        logger.warning("Failed to parse %s: %s", source, exc)
        return None

    if not isinstance(loaded, dict):
        logger.warning("Ignoring %s: expected a mapping, got %s", source, type(loaded).__name__)
        return None
    return loaded


class GitHubContentsClient:
    """Read files from one repository through the contents API."""

    def __init__(
        self,
        owner: str,
        repo: str,
        config: GitHubContentsConfig,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.config = config
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout)
        self._owns_client = http_client is None

    async def __aenter__(self) -> "GitHubContentsClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.raw+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "schemawatch",
        }
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"
        return headers

    async def fetch(self, path: str, ref: Optional[str] = None) -> Optional[str]:
        """
        Return the raw text of ``path`` at ``ref`` or ``None`` if it does not exist.

        Without a ref GitHub serves the repository's default branch.

        Raises:
            GitHubAPIError: on transport errors and non-404 error responses
        """
        url = (
            f"{self.config.api_url.rstrip('/')}/repos/{quote(self.owner)}/{quote(self.repo)}"
            f"/contents/{quote(path.lstrip('/'))}"
        )
        params = {"ref": ref} if ref else None
        try:
            response = await self._client.get(url, headers=self._headers(), params=params)
        except httpx.HTTPError as exc:
            raise GitHubAPIError.unreachable(url, exc) from exc

        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise GitHubAPIError.http_error(response.status_code, url)
        return response.text

    async def load_file(self, pointer: SchemaPointer) -> str:
        text = await self.fetch(pointer.path, pointer.ref)
        if text is None:
            raise SchemaNotFoundError(pointer.path, pointer.ref)
        return text

    async def load_config(self) -> Optional[dict[str, Any]]:
        text = await self.fetch(self.config.config_path)
        if text is None:
            logger.info("No %s in %s/%s", self.config.config_path, self.owner, self.repo)
            return None
        return parse_config(text, self.config.config_path)
