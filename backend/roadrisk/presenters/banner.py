from __future__ import annotations

import os
import time
from dataclasses import dataclass
from typing import Callable, Optional

DEFAULT_DISPLAY_SECONDS = float(os.getenv("ALERT_DISPLAY_SECONDS", "5"))


@dataclass(frozen=True)
class Banner:
    message: str
    alert_tier: str
    shown_at: float
    expires_at: float

    @property
    def level(self) -> str:
        return self.alert_tier


class BannerPresenter:
    """Single-slot alert banner with a restartable auto-hide timer.

    Expiry is checked against ``clock`` whenever the banner is read, which
    keeps the presenter free of background timers.
    """

    def __init__(
        self,
        display_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        on_show: Optional[Callable[[Banner], None]] = None,
        on_hide: Optional[Callable[[Banner], None]] = None,
    ) -> None:
        if display_seconds is None:
            display_seconds = DEFAULT_DISPLAY_SECONDS
        if display_seconds < 0:
            raise ValueError("display_seconds must be >= 0")
        self.display_seconds = display_seconds
        self._clock = clock
        self._on_show = on_show
        self._on_hide = on_hide
        self._banner: Optional[Banner] = None

    def present(self, message: str, alert_tier: str) -> None:
        now = self._clock()
        self._banner = Banner(
            message=message,
            alert_tier=alert_tier,
            shown_at=now,
            expires_at=now + self.display_seconds,
        )
        if self._on_show:
            self._on_show(self._banner)

    def current(self) -> Optional[Banner]:
        banner = self._banner
        if banner is None:
            return None
        if self._clock() >= banner.expires_at:
            self._banner = None
            if self._on_hide:
                self._on_hide(banner)
            return None
        return banner

    def dismiss(self) -> None:
        banner, self._banner = self._banner, None
        if banner is not None and self._on_hide:
            self._on_hide(banner)
