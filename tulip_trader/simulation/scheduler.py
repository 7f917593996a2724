"""Timers that drive a live game.

A live game has two independent clocks, the day tick and the (faster)
field growth tick, plus a one-shot timer that takes news headlines down.
All of them mutate the same engine, so every mutation goes through a
single lock: player actions and timer callbacks never interleave within
one mutation.
"""

import threading
import logging
from typing import Any, Callable, Dict, Optional
from tulip_trader.models import ActionResult
from tulip_trader.simulation.runner import GameEngine

logger = logging.getLogger("tulip_trader.scheduler")


class RepeatingTimer:
    """Runs a callback every ``interval`` seconds on a daemon thread until cancelled."""

    def __init__(self, interval: float, callback: Callable[[], Any], name: str = "timer"):
        self.interval = interval
        self.callback = callback
        self.name = name
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=max(1.0, self.interval * 2))

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                if self.callback() is False:
                    break
            except Exception:
                logger.exception(f"Timer '{self.name}' callback failed; stopping")
                break


class GameSession:
    """A live game: an engine plus its day, growth and news timers."""

    def __init__(self, engine: GameEngine):
        self.engine = engine
        self.lock = threading.Lock()
        self._day_timer: Optional[RepeatingTimer] = None
        self._growth_timer: Optional[RepeatingTimer] = None
        self._news_timer: Optional[threading.Timer] = None

    @property
    def running(self) -> bool:
        """Whether the day clock is ticking; false once it stopped itself at game over."""
        return self._day_timer is not None and self._day_timer.is_alive

    def start(self) -> None:
        """Start the day and growth clocks."""
        if self.running:
            return
        config = self.engine.config
        self._day_timer = RepeatingTimer(
            config.day_interval_seconds, self._on_day, name=f"day-{self.engine.game_id}"
        )
        self._growth_timer = RepeatingTimer(
            config.growth_interval_seconds, self._on_growth, name=f"growth-{self.engine.game_id}"
        )
        self._day_timer.start()
        self._growth_timer.start()
        logger.debug(f"Session {self.engine.game_id} started")

    def stop(self) -> None:
        """Cancel every timer. Safe to call more than once."""
        for timer in (self._day_timer, self._growth_timer):
            if timer is not None:
                timer.cancel()
        if self._news_timer is not None:
            self._news_timer.cancel()
        self._day_timer = None
        self._growth_timer = None
        self._news_timer = None
        logger.debug(f"Session {self.engine.game_id} stopped")

    def restart(self, role: Optional[str] = None) -> Dict[str, Any]:
        """Reset the game; clocks resume if they had been started and not stopped."""
        was_started = self._day_timer is not None
        self.stop()
        with self.lock:
            self.engine.restart(role)
            snapshot = self.engine.snapshot()
        if was_started:
            self.start()
        return snapshot

    def tick(self) -> Dict[str, Any]:
        """Advance one day immediately."""
        with self.lock:
            news_before = len(self.engine.state["news_log"])
            self.engine.tick()
            posted = len(self.engine.state["news_log"]) > news_before
            snapshot = self.engine.snapshot()
        if posted:
            self._schedule_news_clear()
        return snapshot

    def perform(self, action: str, **kwargs) -> ActionResult:
        with self.lock:
            return self.engine.perform(action, **kwargs)

    def snapshot(self) -> Dict[str, Any]:
        with self.lock:
            return self.engine.snapshot()

    # ========================================================================
    # TIMER CALLBACKS
    # ========================================================================

    def _on_day(self) -> bool:
        self.tick()
        # Returning False ends the repeating timer
        return not self.engine.state["game_over"]

    def _on_growth(self) -> bool:
        with self.lock:
            self.engine.grow()
            return not self.engine.state["game_over"]

    def _schedule_news_clear(self) -> None:
        if self._news_timer is not None:
            self._news_timer.cancel()
        timer = threading.Timer(self.engine.config.news_display_seconds, self._clear_news)
        timer.daemon = True
        self._news_timer = timer
        timer.start()

    def _clear_news(self) -> None:
        with self.lock:
            self.engine.clear_news()
