"""Main entry point for Career Compass."""

import argparse
import asyncio
import json
import sys
from datetime import UTC, datetime
from pathlib import Path

import yaml

from src import __version__
from src.config.settings import Mode, Settings
from src.utils.logging import configure_logging, get_logger


def _timestamp_run_id(prefix: str) -> str:
    timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}"


def _resolve_output_path(settings: Settings, *, out: Path | None) -> Path:
    if out is not None:
        path = out
    else:
        path = settings.output_dir / "runs" / _timestamp_run_id("recommend") / "recommendation.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _load_answers(path: Path) -> dict:
    """Load quiz answers from a JSON or YAML file.

    The file holds either the answers mapping itself or an object with an
    ``answers`` key.
    """
    if not path.exists():
        raise FileNotFoundError(f"Answers file not found: {path}")

    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in answers file: {path}") from e
    else:
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in answers file: {path}") from e

    if isinstance(data, dict) and isinstance(data.get("answers"), dict):
        data = data["answers"]
    if not isinstance(data, dict):
        raise ValueError(f"Answers file must contain a mapping: {path}")
    return data


def _write_json(path: Path, payload: object) -> None:
    def _default(value: object):
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        return str(value)

    path.write_text(
        json.dumps(payload, indent=2, ensure_ascii=False, default=_default),
        encoding="utf-8",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="career-compass",
        description="Career Compass: career recommendations from an interest quiz",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m src recommend answers.json
  python -m src recommend answers.yaml --offline --out result.json
  python -m src questions
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands",
    )

    recommend_parser = subparsers.add_parser(
        "recommend",
        help="Recommend careers for a file of quiz answers",
    )
    recommend_parser.add_argument(
        "answers_file",
        type=Path,
        help="JSON or YAML mapping of question id to agree/disagree",
    )
    recommend_parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Output JSON path (defaults under artifacts/runs/)",
    )
    recommend_parser.add_argument(
        "--no-insight",
        action="store_true",
        help="Skip the AI insight and use the templated one",
    )
    recommend_parser.add_argument(
        "--offline",
        action="store_true",
        help="Do not call the AI or taxonomy services (catalog only)",
    )

    subparsers.add_parser("careers", help="List the static career catalog")
    subparsers.add_parser("questions", help="List the quiz questions")

    return parser


def _print_recommendation(recommendation) -> None:
    for result in recommendation.results:
        print(
            f"{result.rank}. {result.name} ({result.match_score}%) "
            f"[{result.source_tag.value}]"
        )
        if result.rationale:
            print(f"   {result.rationale}")
    print()
    print(recommendation.insight.insight)


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(level=log_level)

    if parsed.command is None:
        parser.print_help()
        return 0

    if parsed.command == "questions":
        from src.recommend.questions import QUESTION_TABLE

        for question in QUESTION_TABLE.values():
            print(
                f"{question.question_id:>2}. {question.description} "
                f"[{question.category}, weight {question.weight}]"
            )
        return 0

    if parsed.command == "careers":
        from src.recommend.catalog import load_catalog
        from src.recommend.config import get_recommend_config

        try:
            catalog = load_catalog(get_recommend_config().catalog_path)
        except (FileNotFoundError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        for record in catalog:
            print(f"{record.name} ({record.category}) - {record.salary or 'n/a'}")
        return 0

    if parsed.command == "recommend":
        from src.recommend.service import RecommendationService

        try:
            answers = _load_answers(parsed.answers_file)
        except (FileNotFoundError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        offline = parsed.offline or settings.mode == Mode.OFFLINE
        logger.info(
            f"Career Compass v{__version__} recommending "
            f"({'offline' if offline else 'online'})"
        )

        async def _run():
            async with RecommendationService(offline=offline) as service:
                return await service.recommend(
                    answers, include_insight=not parsed.no_insight
                )

        try:
            recommendation = asyncio.run(_run())
        except (FileNotFoundError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        _print_recommendation(recommendation)

        output_path = _resolve_output_path(settings, out=parsed.out)
        _write_json(output_path, recommendation.to_dict())
        get_logger("cli").debug(f"Wrote {len(recommendation.results)} results to {output_path}")
        print(f"Wrote: {output_path}")
        return 0

    return 0


if __name__ == "__main__":
    sys.exit(main())
