"""Command line entry point for lexibase maintenance tasks."""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

from . import logging_manager as log_mgr
from .config_manager import get_settings
from .database import create_schema, dispose_engine
from .jobs import build_scheduler, run_consolidation_pass, run_translation_reduction_pass
from .oracle import LLMSentenceAnalysisOracle, SentenceAnalysisOracle
from .results import BatchReport
from .services import SentenceAnalysisPipeline, SentenceIngestionPipeline, StatusImportService

logger = log_mgr.get_logger("cli")

OracleFactory = Callable[[], SentenceAnalysisOracle]


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lexibase",
        description="Lesson ingestion, sentence analysis and lexicon maintenance.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging output.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create the database tables.")

    ingest_parser = subparsers.add_parser("ingest", help="Parse a lesson file and store its sentences.")
    ingest_parser.add_argument("file", help="Path to an SRT, ASS or plain-text lesson file.")
    ingest_parser.add_argument("--lesson-id", type=int, required=True, help="Lesson that owns the sentences.")
    ingest_parser.add_argument("--language", required=True, help="Language code of the lesson, e.g. ja.")
    ingest_parser.add_argument(
        "--split-cues",
        action="store_true",
        default=None,
        help="Split subtitle cues on sentence punctuation and share their timing.",
    )
    ingest_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the parsed sentences without storing them.",
    )

    analyze_parser = subparsers.add_parser("analyze", help="Fill missing word splits for a lesson.")
    analyze_parser.add_argument("--lesson-id", type=int, required=True)
    analyze_parser.add_argument("--language", required=True)

    import_parser = subparsers.add_parser("import-marks", help="Import word statuses from a JSON card export.")
    import_parser.add_argument("file", help="JSON file holding a list of cards or {'results': [...]}.")
    import_parser.add_argument("--user-id", type=int, required=True)
    import_parser.add_argument("--language", required=True)

    subparsers.add_parser("consolidate", help="Merge half-width katakana duplicates once.")
    subparsers.add_parser("reduce-translations", help="Collapse oversized translation sets once.")

    schedule_parser = subparsers.add_parser("schedule", help="Run the maintenance jobs periodically.")
    schedule_parser.add_argument(
        "--run-immediately",
        action="store_true",
        help="Run each job once at start-up instead of waiting one interval.",
    )
    return parser


def _print(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


def _report_payload(report: BatchReport) -> Dict[str, Any]:
    return {
        "total": report.total,
        "succeeded": report.succeeded,
        "failed": report.failed,
        "errors": report.errors(limit=10),
    }


def _cmd_init_db(args: argparse.Namespace, oracle_factory: OracleFactory) -> int:
    create_schema()
    logger.info("Database schema created")
    return 0


def _cmd_ingest(args: argparse.Namespace, oracle_factory: OracleFactory) -> int:
    path = Path(args.file)
    pipeline = SentenceIngestionPipeline(split_cues=args.split_cues)
    if args.dry_run:
        result = pipeline.ingest_lesson_file(
            path.read_text(encoding="utf-8-sig"), path.name, args.language
        )
        if not result.success:
            _print({"success": False, "message": result.message})
            return 1
        _print([asdict(sentence) for sentence in result.data or []])
        return 0

    result = pipeline.ingest_lesson(args.lesson_id, str(path), args.language, path.name)
    _print({"success": result.success, "message": result.message, "sentence_ids": result.data})
    return 0 if result.success else 1


def _cmd_analyze(args: argparse.Namespace, oracle_factory: OracleFactory) -> int:
    pipeline = SentenceAnalysisPipeline(oracle_factory())
    result = pipeline.analyze_lesson(args.lesson_id, args.language)
    if not result.success:
        _print({"success": False, "message": result.message})
        return 1
    sentences = result.data or []
    pending = [sentence.id for sentence in sentences if not sentence.is_analyzed]
    _print(
        {
            "success": True,
            "sentences": len(sentences),
            "analyzed": len(sentences) - len(pending),
            "pending": pending,
        }
    )
    return 0 if not pending else 2


def _cmd_import_marks(args: argparse.Namespace, oracle_factory: OracleFactory) -> int:
    data = json.loads(Path(args.file).read_text(encoding="utf-8"))
    cards = data.get("results", []) if isinstance(data, dict) else data
    if not isinstance(cards, list):
        _print({"success": False, "message": "Expected a list of cards"})
        return 1
    report = StatusImportService().import_cards(args.user_id, args.language, cards)
    _print(_report_payload(report))
    return 0 if not report.failed else 2


def _cmd_consolidate(args: argparse.Namespace, oracle_factory: OracleFactory) -> int:
    report = run_consolidation_pass()
    _print(_report_payload(report))
    return 0 if not report.failed else 2


def _cmd_reduce(args: argparse.Namespace, oracle_factory: OracleFactory) -> int:
    report = run_translation_reduction_pass(oracle_factory())
    _print(_report_payload(report))
    return 0 if not report.failed else 2


def _cmd_schedule(args: argparse.Namespace, oracle_factory: OracleFactory) -> int:
    scheduler = build_scheduler(oracle_factory())

    def _shutdown(signum: int, frame: Any) -> None:
        logger.info("Received signal %s; stopping scheduler", signum)
        scheduler.stop(timeout=5)

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)
    scheduler.start(run_immediately=args.run_immediately)
    scheduler.wait()
    return 0


_COMMANDS: Dict[str, Callable[[argparse.Namespace, OracleFactory], int]] = {
    "init-db": _cmd_init_db,
    "ingest": _cmd_ingest,
    "analyze": _cmd_analyze,
    "import-marks": _cmd_import_marks,
    "consolidate": _cmd_consolidate,
    "reduce-translations": _cmd_reduce,
    "schedule": _cmd_schedule,
}


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    oracle_factory: Optional[OracleFactory] = None,
) -> int:
    """Execute the CLI with the supplied ``argv`` sequence."""

    args = build_cli_parser().parse_args(argv)
    settings = get_settings()
    level = logging.DEBUG if args.debug else logging.getLevelName(settings.log_level)
    log_mgr.setup_logging(level, log_file=settings.log_file)
    handler = _COMMANDS[args.command]
    try:
        return handler(args, oracle_factory or LLMSentenceAnalysisOracle)
    finally:
        dispose_engine()


if __name__ == "__main__":  # pragma: no cover - manual execution
    sys.exit(main())
