"""
Command-line interface for mindtutor.

Usage:
    mindtutor status
    mindtutor series U
    mindtutor complete OT-1
    mindtutor reset
    mindtutor cache-stats
    mindtutor cache-clear
"""

import argparse
import logging
from pathlib import Path
from typing import Optional

from mindtutor.classroom import CatalogFetchError, Navigator
from mindtutor.config import load_settings
from mindtutor.tutor import Tutor, create_tutor


logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

def cmd_status(tutor: Tutor, args: argparse.Namespace) -> int:
    summary = tutor.navigator.get_progress_summary()
    print(f"Current series: {summary['current_series_id']}")
    if summary["current_lesson_id"]:
        print(f"Current lesson: {summary['current_lesson_id']} "
              f"(paragraph {summary['current_paragraph_index'] + 1})")
    print(f"Completed lessons: {summary['completed']}")
    for stats in summary["series"]:
        lock = "" if stats["reachable"] else " [locked]"
        print(f"  {stats['id']:<3} {stats['title']:<14} {stats['completed']} completed{lock}")
    return 0


def cmd_series(tutor: Tutor, args: argparse.Namespace) -> int:
    view = tutor.navigator.get_series_view(args.series_id)
    print(f"{view.series.title} ({view.completed_count}/{view.total_count} completed)")
    if not view.reachable:
        print("  Finish a lesson in every earlier series to unlock this one.")
    for nav in view.lessons:
        indicator = Navigator.get_status_indicator(nav.status)
        print(f"  {indicator} {nav.lesson.lesson_id:<6} {nav.lesson.title}")
    return 0


def cmd_complete(tutor: Tutor, args: argparse.Namespace) -> int:
    step = tutor.navigator.complete_lesson(args.lesson_id)
    print(f"Completed {args.lesson_id}")
    if step.next_lesson_id:
        print(f"Next lesson: {step.next_lesson_id}")
    elif step.next_series_id:
        print(f"Series finished. Next series: {step.next_series_id.value}")
    else:
        print("Curriculum finished.")
    return 0


def cmd_reset(tutor: Tutor, args: argparse.Namespace) -> int:
    tutor.progress.reset()
    print("Progress reset.")
    return 0


def cmd_cache_stats(tutor: Tutor, args: argparse.Namespace) -> int:
    stats = tutor.cache.stats()
    print(f"Cached items: {stats['item_count']}")
    if stats["item_count"]:
        print(f"Oldest: {stats['oldest_age'] / 3_600_000:.1f}h ago")
        print(f"Newest: {stats['newest_age'] / 3_600_000:.1f}h ago")
    return 0


def cmd_cache_clear(tutor: Tutor, args: argparse.Namespace) -> int:
    tutor.cache.clear()
    print("Cache cleared.")
    return 0


# -----------------------------------------------------------------------------
# Main
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mindtutor",
        description="Track and navigate tutor lesson progress",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to YAML settings file"
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        help="Path to .env file"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    status = subparsers.add_parser("status", help="Show progress summary")
    status.set_defaults(func=cmd_status)

    series = subparsers.add_parser("series", help="List lessons of a series with their status")
    series.add_argument("series_id", help="Series id or alias (OT, U, L, C)")
    series.set_defaults(func=cmd_series)

    complete = subparsers.add_parser("complete", help="Mark a lesson completed")
    complete.add_argument("lesson_id", help="Lesson id, e.g. OT-1")
    complete.set_defaults(func=cmd_complete)

    reset = subparsers.add_parser("reset", help="Wipe all progress")
    reset.set_defaults(func=cmd_reset)

    cache_stats = subparsers.add_parser("cache-stats", help="Show generation cache statistics")
    cache_stats.set_defaults(func=cmd_cache_stats)

    cache_clear = subparsers.add_parser("cache-clear", help="Clear the generation cache")
    cache_clear.set_defaults(func=cmd_cache_clear)

    return parser


def main(argv: Optional[list[str]] = None, tutor: Optional[Tutor] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )

    if tutor is None:
        settings = load_settings(env_file=args.env_file, config_file=args.config)
        tutor = create_tutor(settings)

    try:
        return args.func(tutor, args)
    except CatalogFetchError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
