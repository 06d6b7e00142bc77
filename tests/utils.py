from __future__ import annotations

import threading
from pathlib import Path

from chatrelay.db import create_db_engine, create_session_factory, init_db
from chatrelay.protocol import FaultInjector
from chatrelay.services import PersistenceDispatcher, RelayService


class ManualClock:
    """Thread-safe clock that only moves when a test advances it."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._lock = threading.Lock()

    def __call__(self) -> float:
        with self._lock:
            return self._now

    def advance(self, seconds: float) -> None:
        with self._lock:
            self._now += seconds


def build_persistence(tmp_path: Path, *, timeout_seconds: float = 5.0):
    """File-backed SQLite store so request and writer threads use separate connections."""
    engine = create_db_engine(f"sqlite+pysqlite:///{tmp_path / 'chat.db'}")
    init_db(engine)
    dispatcher = PersistenceDispatcher(
        create_session_factory(engine),
        workers=1,
        timeout_seconds=timeout_seconds,
    )
    return engine, dispatcher


def build_relay(
    tmp_path: Path,
    *,
    clock=None,
    window_size: int = 5,
    fault_injector: FaultInjector | None = None,
    idle_timeout_seconds: float = 300,
    sweep_interval_seconds: float = 60,
) -> RelayService:
    engine, dispatcher = build_persistence(tmp_path)
    kwargs = {}
    if clock is not None:
        kwargs["clock"] = clock
    return RelayService(
        persistence=dispatcher,
        fault_injector=fault_injector or FaultInjector.disabled(),
        window_size=window_size,
        idle_timeout_seconds=idle_timeout_seconds,
        sweep_interval_seconds=sweep_interval_seconds,
        engine=engine,
        **kwargs,
    )
