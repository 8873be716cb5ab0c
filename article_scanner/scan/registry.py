"""Scanner strategy interface and name-keyed registry."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..core.errors import ConfigurationError
from ..core.types import Article, ScanRequest


class Scanner(ABC):
    """A single site scanning strategy (arxiv, ...)."""

    name: str = ""

    @abstractmethod
    async def scan(self, request: ScanRequest) -> list[Article]:
        """Return the de-duplicated articles of request.day across categories."""
        raise NotImplementedError


class ScannerRegistry:
    """Maps scanner names to their implementations."""

    def __init__(self) -> None:
        self._scanners: dict[str, Scanner] = {}

    def register(self, scanner: Scanner) -> None:
        """Add or replace a scanner under its name."""
        self._scanners[scanner.name] = scanner

    def resolve(self, name: str) -> Scanner:
        scanner = self._scanners.get(name)
        if scanner is None:
            supported = ", ".join(self.available()) or "none"
            raise ConfigurationError(f"scanner {name} is not registered. Registered: {supported}")
        return scanner

    def available(self) -> list[str]:
        return sorted(self._scanners.keys())
