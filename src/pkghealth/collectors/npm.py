"""
npm registry client for fetching package metadata.

Only the ``latest`` dist-tag and per-version deprecation notices are
used; the rest of the registry document is ignored.
"""

from typing import Optional

import aiohttp

from pkghealth.collectors.base import Collector
from pkghealth.config import DEFAULT_REGISTRY_URL, DEFAULT_TIMEOUT
from pkghealth.core.models import PackageMetadata
from pkghealth.core.validation import encode_package_name_for_url, validate_package_name


class NpmRegistryClient(Collector[PackageMetadata]):
    """Async client for the npm registry.

    Issues one ``GET {registry}/{name}`` per package.
    """

    SERVICE = "npm registry"

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str = DEFAULT_REGISTRY_URL,
        user_agent: Optional[str] = None,
    ):
        """Initialize the registry client.

        Args:
            session: Optional aiohttp session.
            timeout: Per-request timeout in seconds.
            base_url: Registry root, for mirrors and private registries.
            user_agent: Optional User-Agent header value.
        """
        super().__init__(session, timeout, user_agent)
        self.base_url = base_url.rstrip("/")

    async def fetch(self, identifier: str) -> PackageMetadata:
        """Fetch package metadata from the registry.

        Args:
            identifier: Package name (scoped names such as ``@types/node``
                are supported).

        Returns:
            PackageMetadata object.

        Raises:
            ValidationError: If the package name is invalid.
            PackageNotFoundError: If the package doesn't exist.
            NetworkError: If the request fails or times out.
        """
        name = validate_package_name(identifier)
        url = self.package_url(name)
        data = await self._get_json(url, name)
        return PackageMetadata.from_registry(name, data)

    def package_url(self, name: str) -> str:
        """Build the registry document URL for a package."""
        return f"{self.base_url}/{encode_package_name_for_url(name)}"
