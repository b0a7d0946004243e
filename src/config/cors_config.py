"""CORS configuration for the browser frontend."""

import logging
import re
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

# Vite dev server serving the single-page frontend
DEFAULT_DEVELOPMENT_ORIGINS = ["http://localhost:5173", "http://127.0.0.1:5173"]


class CORSConfigurationError(Exception):
    """Raised when CORS configuration is invalid or insecure."""

    pass


def normalize_origin(origin: str) -> str:
    """Strip whitespace and trailing slashes from an origin URL.

    Raises:
        CORSConfigurationError: If origin is empty or not an absolute URL.

    """
    origin = origin.strip()

    if not origin:
        raise CORSConfigurationError("Origin cannot be empty")

    if origin == "*":
        return origin

    parsed = urlparse(origin)
    if not parsed.scheme or not parsed.netloc:
        raise CORSConfigurationError(f"Invalid origin URL: {origin}")

    return origin.rstrip("/")


def parse_origins(value: str | list[str] | None) -> list[str]:
    """Parse a comma-separated string (or list) of origins."""
    if value is None:
        return []

    items = value if isinstance(value, list) else value.split(",")
    return [normalize_origin(item) for item in items if item.strip()]


class CORSConfiguration:
    """Validated CORS settings.

    Rules:
    1. Credentials are never combined with the wildcard origin
    2. Wildcard origins are development-only
    3. Production needs explicit origins or an origin regex
    """

    def __init__(
        self,
        allow_origins: str | list[str] | None = None,
        allow_origin_regex: str | None = None,
        allow_credentials: bool = True,
        max_age: int = 600,
        environment: str = "development",
    ):
        self.environment = environment.lower()
        self.allow_credentials = allow_credentials
        self.max_age = max_age

        origins = parse_origins(allow_origins)
        if not origins and self.environment == "development":
            origins = list(DEFAULT_DEVELOPMENT_ORIGINS)
        self.allow_origins = origins

        self.origin_regex: re.Pattern[str] | None = None
        if allow_origin_regex:
            try:
                self.origin_regex = re.compile(allow_origin_regex)
            except re.error as exc:
                raise CORSConfigurationError(f"Invalid regex pattern: {allow_origin_regex}") from exc

        self._validate_security_rules()

    def _validate_security_rules(self) -> None:
        has_wildcard = "*" in self.allow_origins

        if self.allow_credentials and has_wildcard:
            raise CORSConfigurationError(
                "Cannot enable credentials with wildcard origins (*). Provide explicit allowed origins instead."
            )

        if has_wildcard and self.environment != "development":
            raise CORSConfigurationError(f"Wildcard origins (*) are not allowed in {self.environment} environment.")

        if self.environment == "production" and not self.allow_origins and self.origin_regex is None:
            raise CORSConfigurationError("Production environment requires explicit allowed origins.")

    def get_middleware_config(self) -> dict:
        """Get keyword arguments for Starlette's CORSMiddleware."""
        return {
            "allow_origins": self.allow_origins,
            "allow_origin_regex": self.origin_regex.pattern if self.origin_regex else None,
            "allow_credentials": self.allow_credentials,
            "allow_methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["authorization", "content-type"],
            "max_age": self.max_age,
        }

    def log_configuration(self) -> None:
        """Log effective CORS configuration at startup."""
        logger.info(
            f"CORS configuration ({self.environment}): origins={self.allow_origins} "
            f"regex={'enabled' if self.origin_regex else 'disabled'} credentials={self.allow_credentials}"
        )
