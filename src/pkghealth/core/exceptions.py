"""
Custom exceptions for pkghealth.
"""


class PkgHealthError(Exception):
    """Base exception for all pkghealth errors."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class PackageNotFoundError(PkgHealthError):
    """Raised when a package cannot be found on the registry."""

    def __init__(self, package_name: str, service: str = "npm registry"):
        super().__init__(
            f"Package not found: {package_name}",
            details=f"The package does not exist on the {service} or may have been unpublished.",
        )
        self.package_name = package_name
        self.service = service


class RateLimitError(PkgHealthError):
    """Raised when an API rate limit is exceeded."""

    def __init__(
        self,
        service: str,
        reset_time: int | None = None,
    ):
        details = None
        if reset_time:
            details = f"Rate limit resets in {reset_time} seconds."
        super().__init__(f"Rate limit exceeded for {service}", details=details)
        self.service = service
        self.reset_time = reset_time


class NetworkError(PkgHealthError):
    """Raised when a network request fails or times out."""

    def __init__(self, url: str, status_code: int | None = None, details: str | None = None):
        message = f"Network request failed: {url}"
        if status_code:
            message += f" (status {status_code})"
        super().__init__(message, details=details)
        self.url = url
        self.status_code = status_code


class ValidationError(PkgHealthError):
    """Raised when data validation fails."""

    def __init__(self, field: str, value: str, reason: str):
        super().__init__(
            f"Validation failed for {field}",
            details=f"Value '{value}' is invalid: {reason}",
        )
        self.field = field
        self.value = value
        self.reason = reason


class ManifestError(PkgHealthError):
    """Raised when a manifest does not have the expected structure."""

    def __init__(self, details: str):
        super().__init__("Invalid manifest", details=details)


class AuditError(PkgHealthError):
    """Raised when the audit source cannot produce a result."""

    def __init__(self, source: str, details: str | None = None):
        super().__init__(f"Audit failed for {source}", details=details)
        self.source = source


class ReportGenerationError(PkgHealthError):
    """Raised when a report cannot be generated at all."""

    def __init__(self, cause: Exception | str):
        super().__init__("Failed to generate dependency report", details=str(cause))
        self.cause = cause
