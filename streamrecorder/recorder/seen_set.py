"""Membership tracking for segment locators already recorded."""

from __future__ import annotations

from typing import Set


class SeenSet:
    """Grows monotonically for one session so re-listed segments are skipped."""

    def __init__(self) -> None:
        self._seen: Set[str] = set()

    def admit(self, locator: str) -> bool:
        """Records ``locator`` and returns True the first time it is offered."""

        if locator in self._seen:
            return False
        self._seen.add(locator)
        return True

    def __contains__(self, locator: object) -> bool:
        return locator in self._seen

    def __len__(self) -> int:
        return len(self._seen)
