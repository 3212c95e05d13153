from __future__ import annotations

from typing import List, Protocol, Tuple


class AlertPresenter(Protocol):
    """Contract for whatever displays proximity alerts."""

    def present(self, message: str, alert_tier: str) -> None:
        """Show ``message`` right away, replacing any message already visible.

        Implementations hide the message on their own after a fixed delay;
        a newer call restarts that delay.
        """
        raise NotImplementedError


class RecordingPresenter:
    def __init__(self) -> None:
        self.presented: List[Tuple[str, str]] = []

    def present(self, message: str, alert_tier: str) -> None:
        self.presented.append((message, alert_tier))

    def drain(self) -> List[Tuple[str, str]]:
        items, self.presented = self.presented, []
        return items
