"""
Best-effort activation and restart of status-area applications.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

from menubar_core.providers import ActivationProvider
from menubar_shared.application import ManagedApplication
from menubar_manager.menubar_manager import logger as app_logger

_LOGGER = app_logger.get_logger()

DEFAULT_RESTART_WAIT_SECONDS = 2.0
EXIT_POLL_INTERVAL_SECONDS = 0.1


class Strategy(Enum):
    DIRECT_ACTIVATION = 1
    LAUNCH_BY_IDENTITY = 2
    OPEN_BY_LOCATION = 3


@dataclass(frozen=True, slots=True)
class ActivationOutcome:
    succeeded: bool
    via: Optional[Strategy] = None
    attempted: Tuple[Strategy, ...] = ()

    @classmethod
    def success(cls, via: Strategy, attempted: Tuple[Strategy, ...]) -> "ActivationOutcome":
        return cls(True, via, attempted)

    @classmethod
    def failure(cls, attempted: Tuple[Strategy, ...]) -> "ActivationOutcome":
        return cls(False, None, attempted)


@dataclass(frozen=True, slots=True)
class RestartOutcome:
    app: ManagedApplication
    relaunched: bool
    exit_confirmed: bool


class ActivationStrategy:
    """
    Runs the fallback chain: direct activation, launch by identity, then open
    by bundle location. The first strategy that succeeds ends the chain.

    Opening by location may start a second instance when an earlier request
    was honoured asynchronously; that is accepted.
    """

    def __init__(
        self,
        provider: ActivationProvider,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._provider = provider
        self._sleep = sleep
        self._clock = clock

    def activate(self, app: ManagedApplication) -> ActivationOutcome:
        attempted: list[Strategy] = []
        _LOGGER.info("Activating {} ({})", app.title, app.identity)

        for strategy in Strategy:
            if strategy is Strategy.OPEN_BY_LOCATION and not app.location:
                _LOGGER.debug("No bundle location for {}; skipping open-by-location.", app.identity)
                continue
            attempted.append(strategy)
            if self._attempt(strategy, app):
                _LOGGER.info("Activated {} via {}", app.identity, strategy.name)
                return ActivationOutcome.success(strategy, tuple(attempted))

        _LOGGER.warning("All activation strategies failed for {}", app.identity)
        return ActivationOutcome.failure(tuple(attempted))

    def restart(self, app: ManagedApplication, *, wait_seconds: float = DEFAULT_RESTART_WAIT_SECONDS) -> RestartOutcome:
        """
        Terminate ``app``, wait a bounded time for it to exit, then relaunch it.

        The relaunch happens even when the exit was never confirmed; a slow
        host can therefore briefly see both instances.
        """
        _LOGGER.info("Restarting {} ({})", app.title, app.identity)
        try:
            self._provider.terminate(app.process_id)
        except (OSError, RuntimeError) as exc:
            _LOGGER.error("Terminate request for {} failed: {}", app.identity, exc)

        exit_confirmed = self._await_exit(app, wait_seconds)
        if not exit_confirmed:
            _LOGGER.warning(
                "{} did not confirm exit within {:.1f}s; relaunching anyway.",
                app.identity,
                wait_seconds,
            )

        relaunched = self._call(self._provider.launch, app.identity, label="launch")
        if not relaunched:
            _LOGGER.warning("Relaunch of {} was refused by the host.", app.identity)
        return RestartOutcome(app=app, relaunched=relaunched, exit_confirmed=exit_confirmed)

    def _attempt(self, strategy: Strategy, app: ManagedApplication) -> bool:
        if strategy is Strategy.DIRECT_ACTIVATION:
            return self._call(self._provider.activate, app.identity, label="activate")
        if strategy is Strategy.LAUNCH_BY_IDENTITY:
            return self._call(self._provider.launch, app.identity, label="launch")

        try:
            self._provider.open_by_location(app.location)
        except (OSError, RuntimeError) as exc:
            _LOGGER.warning("open-by-location failed for {}: {}", app.identity, exc)
            return False
        return True

    def _call(self, func: Callable[[str], bool], identity: str, *, label: str) -> bool:
        try:
            return bool(func(identity))
        except (OSError, RuntimeError) as exc:
            _LOGGER.warning("{} request for {} failed: {}", label, identity, exc)
            return False

    def _await_exit(self, app: ManagedApplication, wait_seconds: float) -> bool:
        deadline = self._clock() + wait_seconds
        while True:
            running = self._provider.is_running(app.process_id)
            if running is False:
                return True
            remaining = deadline - self._clock()
            if remaining <= 0:
                return False
            # Unknown state: sleep the whole window instead of polling.
            self._sleep(remaining if running is None else min(EXIT_POLL_INTERVAL_SECONDS, remaining))
