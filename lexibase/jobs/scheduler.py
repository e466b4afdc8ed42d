"""Run maintenance jobs on fixed intervals in background threads."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .. import logging_manager as log_mgr
from ..results import BatchReport
from .single_flight import SingleFlightGuard

logger = log_mgr.get_logger("jobs.scheduler")

JobCallable = Callable[[], BatchReport]


@dataclass(slots=True)
class JobRunReport:
    job: str
    skipped: bool = False
    duration_ms: float = 0.0
    report: Optional[BatchReport] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return not self.skipped and self.error is None


class PeriodicJob:
    """A named callable guarded so overlapping runs are skipped."""

    def __init__(self, name: str, interval_seconds: float, func: JobCallable) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.name = name
        self.interval_seconds = interval_seconds
        self.func = func
        self.guard = SingleFlightGuard(name)

    def run_once(self) -> JobRunReport:
        with self.guard.attempt() as acquired:
            if not acquired:
                logger.info(
                    "Previous %s run still in progress; skipping tick",
                    self.name,
                    extra={"job": self.name, "event": "job.skipped", "status": "skipped"},
                )
                return JobRunReport(job=self.name, skipped=True)

            started = time.perf_counter()
            with log_mgr.log_context(job=self.name):
                try:
                    report = self.func()
                except Exception as exc:
                    duration = round((time.perf_counter() - started) * 1000, 2)
                    logger.error(
                        "Job %s failed",
                        self.name,
                        exc_info=True,
                        extra={"event": "job.failed", "duration_ms": duration, "status": "error"},
                    )
                    return JobRunReport(job=self.name, duration_ms=duration, error=str(exc))
                duration = round((time.perf_counter() - started) * 1000, 2)
                logger.info(
                    "Job %s finished: %d ok, %d failed",
                    self.name,
                    report.succeeded,
                    report.failed,
                    extra={"event": "job.finished", "duration_ms": duration, "status": "ok"},
                )
                return JobRunReport(job=self.name, duration_ms=duration, report=report)


class JobScheduler:
    """Owns a daemon thread per registered job and a shared stop signal."""

    def __init__(self) -> None:
        self._jobs: Dict[str, PeriodicJob] = {}
        self._threads: List[threading.Thread] = []
        self._stop_event = threading.Event()

    @property
    def jobs(self) -> Dict[str, PeriodicJob]:
        return dict(self._jobs)

    @property
    def running(self) -> bool:
        return any(thread.is_alive() for thread in self._threads)

    def register(self, name: str, interval_seconds: float, func: JobCallable) -> PeriodicJob:
        if name in self._jobs:
            raise ValueError(f"Job {name!r} is already registered")
        job = PeriodicJob(name, interval_seconds, func)
        self._jobs[name] = job
        return job

    def run_now(self, name: str) -> JobRunReport:
        try:
            job = self._jobs[name]
        except KeyError:
            raise KeyError(f"Unknown job {name!r}") from None
        return job.run_once()

    def _loop(self, job: PeriodicJob, run_immediately: bool) -> None:
        if run_immediately and not self._stop_event.is_set():
            job.run_once()
        while not self._stop_event.wait(job.interval_seconds):
            job.run_once()

    def start(self, *, run_immediately: bool = False) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._threads = []
        for job in self._jobs.values():
            thread = threading.Thread(
                target=self._loop,
                args=(job, run_immediately),
                name=f"lexibase-job-{job.name}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)
        logger.info("Started %d scheduled jobs", len(self._threads), extra={"event": "scheduler.started"})

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        for thread in self._threads:
            thread.join(timeout)
        self._threads = []
        logger.info("Scheduler stopped", extra={"event": "scheduler.stopped"})

    def wait(self) -> None:
        """Block until :meth:`stop` is called from another thread or a signal."""

        while not self._stop_event.wait(1.0):
            pass


__all__ = ["JobRunReport", "JobScheduler", "PeriodicJob"]
