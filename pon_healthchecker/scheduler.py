#!/usr/bin/env python3
"""
Probe Scheduler
Runs a probe pass over every configured target on a fixed interval
"""

import concurrent.futures
import logging
import threading
import time
from enum import Enum
from typing import List, Optional

from .auth import DeviceLogin
from .exceptions import SchedulerError
from .models import ProbeResult, Settings
from .prober import Prober

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class Scheduler:
    """
    Background ticker driving the prober.

    IDLE -> RUNNING -> STOPPED, where STOPPED is terminal for the instance.
    Cancellation is checked between ticks only; an in-flight tick always
    runs to completion.
    """

    def __init__(self, prober: Prober, settings: Settings, login: Optional[DeviceLogin] = None):
        self.prober = prober
        self.settings = settings
        self.targets = tuple(settings.urls)
        self.login = login

        self.state = SchedulerState.IDLE
        self.ticks_completed = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.state is not SchedulerState.IDLE:
                raise SchedulerError(f"cannot start a scheduler in state {self.state.value}")
            self.state = SchedulerState.RUNNING
            self._thread = threading.Thread(target=self._run, name="pon-healthchecker-collector", daemon=True)
            self._thread.start()
        logger.info(f"starting collector: {len(self.targets)} targets every {self.settings.interval}s")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Ask the loop to exit after the current tick and wait for it"""
        with self._lock:
            if self.state is SchedulerState.IDLE:
                self.state = SchedulerState.STOPPED
                return
            self._stop_event.set()
            thread = self._thread

        if thread is not None:
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("Collector still busy with a probe, it will stop after the current tick")

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self) -> None:
        interval = self.settings.interval
        next_tick = time.monotonic() + interval
        try:
            while not self._stop_event.wait(max(0.0, next_tick - time.monotonic())):
                self.tick()

                next_tick += interval
                now = time.monotonic()
                if now > next_tick:
                    missed = int((now - next_tick) // interval) + 1
                    logger.warning(f"Probe pass overran the interval, skipping {missed} tick(s)")
                    next_tick += missed * interval
        finally:
            self.state = SchedulerState.STOPPED
            logger.info("Gracefully stopping metrics collector")

    def tick(self) -> List[ProbeResult]:
        """Probe every target once, in registration order"""
        if self.settings.max_workers > 1 and len(self.targets) > 1:
            with concurrent.futures.ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
                futures = [executor.submit(self._probe_target, url) for url in self.targets]
                results = [future.result() for future in futures]
        else:
            results = [self._probe_target(url) for url in self.targets]

        self.ticks_completed += 1
        return [result for result in results if result is not None]

    def _probe_target(self, url: str) -> Optional[ProbeResult]:
        if self.login is not None and self.settings.is_device_page(url):
            self.login.login()

        try:
            return self.prober.probe(url)
        except Exception as e:
            logger.exception(f"ERROR {url}: probe failed - {e}")
            return None
