"""
FILE: personadev/config.py
PURPOSE: Configuration for the sync client and the relay, loaded from the environment
EXPORTS:
  - ClientConfig (dataclass)
  - RelayConfig (dataclass)
DEPENDENCIES:
  - python-dotenv (reads .env into the environment)
  - dataclasses (stdlib)
NOTES:
  - Environment variables win over .env entries
  - RelayConfig.missing() reports absent settings up front so the relay can
    refuse data requests instead of failing on the first remote call
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .core.exceptions import InvalidInputError

DEFAULT_API_URL = "http://localhost:3001/api"
DEFAULT_RELAY_PORT = 3001
DEFAULT_TIMEOUT = 15.0


@dataclass
class ClientConfig:
    """Where the sync client sends snapshots."""

    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """
        Load client settings from the environment and .env.

        Raises:
            InvalidInputError: If PERSONADEV_TIMEOUT is not a positive number
        """
        load_dotenv()
        raw_timeout = os.getenv("PERSONADEV_TIMEOUT", str(DEFAULT_TIMEOUT))
        try:
            timeout = float(raw_timeout)
        except ValueError:
            timeout = 0.0
        if timeout <= 0:
            raise InvalidInputError(
                f"PERSONADEV_TIMEOUT must be a positive number of seconds, got '{raw_timeout}'"
            )
        return cls(
            api_url=os.getenv("PERSONADEV_API_URL", DEFAULT_API_URL).rstrip("/"),
            timeout=timeout,
        )


@dataclass
class RelayConfig:
    """Relay server settings and the remote spreadsheet it writes to."""

    spreadsheet_id: Optional[str] = None
    credentials_path: Path = Path("credentials.json")
    host: str = "0.0.0.0"
    port: int = DEFAULT_RELAY_PORT

    @classmethod
    def from_env(cls) -> "RelayConfig":
        load_dotenv()
        spreadsheet_id = (
            os.getenv("GOOGLE_SHEET_ID")
            or os.getenv("SHEET_ID")
            or os.getenv("SPREADSHEET_ID")
        )
        return cls(
            spreadsheet_id=spreadsheet_id or None,
            credentials_path=Path(os.getenv("GOOGLE_CREDENTIALS_FILE", "credentials.json")),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", DEFAULT_RELAY_PORT)),
        )

    def missing(self) -> List[str]:
        """Describe every absent setting the store needs."""
        problems = []
        if not self.spreadsheet_id:
            problems.append(
                "No spreadsheet ID configured. Please add GOOGLE_SHEET_ID to your .env file"
            )
        if not self.credentials_path.exists():
            problems.append(f"Credentials file not found at {self.credentials_path}")
        return problems

    @property
    def is_configured(self) -> bool:
        return not self.missing()
