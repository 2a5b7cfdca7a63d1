"""
npms.io client for package quality and maintenance scores.

npms.io data is a lower-confidence signal than an audit: it is used to
infer risk for packages without explicit vulnerability data.
"""

from typing import Optional
from urllib.parse import quote

import aiohttp

from pkghealth.collectors.base import Collector
from pkghealth.config import DEFAULT_NPMS_URL, DEFAULT_TIMEOUT
from pkghealth.core.models import QualitySignal
from pkghealth.core.validation import validate_package_name


class NpmsClient(Collector[QualitySignal]):
    """Async client for the npms.io v2 package endpoint."""

    SERVICE = "npms.io"

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str = DEFAULT_NPMS_URL,
        user_agent: Optional[str] = None,
    ):
        """Initialize the npms.io client.

        Args:
            session: Optional aiohttp session.
            timeout: Per-request timeout in seconds.
            base_url: API root.
            user_agent: Optional User-Agent header value.
        """
        super().__init__(session, timeout, user_agent)
        self.base_url = base_url.rstrip("/")

    async def fetch(self, identifier: str) -> QualitySignal:
        """Fetch the quality signal for a package.

        Raises:
            ValidationError: If the package name is invalid.
            PackageNotFoundError: If npms.io has not analyzed the package.
            NetworkError: If the request fails or times out.
        """
        name = validate_package_name(identifier)
        url = f"{self.base_url}/package/{quote(name, safe='')}"
        data = await self._get_json(url, name)
        return QualitySignal.from_npms(name, data)
