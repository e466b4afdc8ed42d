"""Periodic maintenance jobs over the lexical knowledge base."""

from __future__ import annotations

from typing import Optional

from ..config_manager import get_settings
from ..oracle import SentenceAnalysisOracle
from . import consolidation, translation_reduction
from .consolidation import ConsolidationJob, run_consolidation_pass
from .scheduler import JobRunReport, JobScheduler, PeriodicJob
from .single_flight import SingleFlightGuard
from .translation_reduction import TranslationReductionJob, run_translation_reduction_pass


def build_scheduler(
    oracle: SentenceAnalysisOracle,
    *,
    consolidation_interval: Optional[float] = None,
    reduction_interval: Optional[float] = None,
) -> JobScheduler:
    """Return a scheduler with the consolidation and reduction jobs registered."""

    settings = get_settings()
    scheduler = JobScheduler()
    scheduler.register(
        consolidation.JOB_NAME,
        consolidation_interval
        if consolidation_interval is not None
        else settings.consolidation_interval_seconds,
        ConsolidationJob().run_consolidation_pass,
    )
    scheduler.register(
        translation_reduction.JOB_NAME,
        reduction_interval if reduction_interval is not None else settings.reduction_interval_seconds,
        TranslationReductionJob(oracle).run_translation_reduction_pass,
    )
    return scheduler


__all__ = [
    "ConsolidationJob",
    "JobRunReport",
    "JobScheduler",
    "PeriodicJob",
    "SingleFlightGuard",
    "TranslationReductionJob",
    "build_scheduler",
    "run_consolidation_pass",
    "run_translation_reduction_pass",
]
