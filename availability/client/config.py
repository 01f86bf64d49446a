"""Configuration for the API client."""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ClientConfig:
    """Where the API lives and how to talk to it."""

    base_url: str = field(default_factory=lambda: os.getenv("BEDWATCH_API_URL", "http://localhost:8000"))
    token: Optional[str] = field(default_factory=lambda: os.getenv("BEDWATCH_API_TOKEN") or None)

    # Seconds per request
    timeout: float = field(default_factory=lambda: float(os.getenv("BEDWATCH_API_TIMEOUT", "10")))

    search_debounce_ms: int = field(
        default_factory=lambda: int(os.getenv("BEDWATCH_SEARCH_DEBOUNCE_MS", "300"))
    )

    @property
    def headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers
