"""Settings for the contacts lookup, read from environment variables.

Usage:
    from dotenv import load_dotenv
    from settings import Settings

    load_dotenv()
    settings = Settings()
    settings.validate()   # raises ConfigurationError if the key is missing or a number is bad
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from exceptions import ConfigurationError

API_KEY_VAR = "GOOGLE_MAPS_API_KEY"


def _env_number(name, default, cast):
    """Read *name* from the environment and convert it with *cast*."""
    raw = os.environ.get(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


@dataclass
class Settings:
    """Runtime configuration.

    Values are read when the object is created so tests can override them
    with ``patch.dict(os.environ, ...)``.
    """

    api_key: str = field(
        default_factory=lambda: os.environ.get(API_KEY_VAR, "")
    )
    output_path: str = field(
        default_factory=lambda: os.environ.get("CONTACTS_OUTPUT", "results.csv")
    )
    #: Meters around the search coordinate.
    radius: int = field(
        default_factory=lambda: _env_number("CONTACTS_RADIUS", "8000", int)
    )
    #: Seconds to wait before a fresh page token is accepted by Google.
    page_token_delay: float = field(
        default_factory=lambda: _env_number("CONTACTS_PAGE_TOKEN_DELAY", "2.0", float)
    )
    #: Results per nearby-search page, fixed by the Places API.
    page_size: int = 20

    def validate(self) -> None:
        """Raise ``ConfigurationError`` if a required setting is missing or out of range."""
        if not self.api_key:
            raise ConfigurationError(
                f"set {API_KEY_VAR} (export {API_KEY_VAR}=<your key>) "
                "or add it to a .env file"
            )
        if self.radius <= 0:
            raise ConfigurationError(f"radius must be positive, got {self.radius}")
        if self.page_token_delay < 0:
            raise ConfigurationError(
                f"CONTACTS_PAGE_TOKEN_DELAY must not be negative, got {self.page_token_delay}"
            )
