# src/main.py — v1
"""CLI entry point — analyze, stats, pipelines commands.

Usage:
    prodanalyzer analyze <file> --pipeline schedule [--shots F] [--sequences F] [-o OUT]
    prodanalyzer stats <file>
    prodanalyzer pipelines
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from prodanalyzer.version import __version__

if TYPE_CHECKING:
    from prodanalyzer.config.settings import Settings
    from prodanalyzer.pipeline.plugin_kit.models import PipelineRun

logger = logging.getLogger(__name__)

PIPELINE_CHOICES = ("script", "schedule", "budget")


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        args.settings = _setup_logging(args.verbose)
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="prodanalyzer",
        description=f"prodanalyzer v{__version__}: multi-stage film production analyzer",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- analyze ---
    p_analyze = subparsers.add_parser(
        "analyze", help="Run an analysis pipeline over a breakdown document",
    )
    p_analyze.add_argument("file", type=Path, help="Path to breakdown JSON")
    p_analyze.add_argument(
        "-p", "--pipeline", choices=PIPELINE_CHOICES, default="script",
        help="Pipeline to run (default: script)",
    )
    p_analyze.add_argument("--shots", type=Path, default=None, help="Shot list JSON")
    p_analyze.add_argument("--sequences", type=Path, default=None, help="Sequence list JSON")
    p_analyze.add_argument("--assets", type=Path, default=None, help="Assets inventory JSON")
    p_analyze.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Write the result JSON here (default: stdout)",
    )
    p_analyze.set_defaults(func=_cmd_analyze)

    # --- stats ---
    p_stats = subparsers.add_parser(
        "stats", help="Show deterministic statistics for a breakdown document",
    )
    p_stats.add_argument("file", type=Path, help="Path to breakdown JSON")
    p_stats.set_defaults(func=_cmd_stats)

    # --- pipelines ---
    p_pipelines = subparsers.add_parser(
        "pipelines", help="List pipelines and their stages",
    )
    p_pipelines.set_defaults(func=_cmd_pipelines)

    return parser


def _read_optional(path: Path | None) -> dict | None:
    from prodanalyzer.core.source import load_json_file

    if path is None:
        return None
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return load_json_file(path)


async def _cmd_analyze(args: argparse.Namespace) -> int:
    """Execute one pipeline and emit its result payload."""
    from prodanalyzer.api.facade import analyze
    from prodanalyzer.core.source import load_json_file

    file_path: Path = args.file
    if not file_path.exists():
        logger.error("File not found: %s", file_path)
        return 1

    logger.info("Analyzing %s with the %s pipeline", file_path.name, args.pipeline)
    run = await analyze(
        load_json_file(file_path),
        pipeline=args.pipeline,
        settings=args.settings,
        shots=_read_optional(args.shots),
        sequences=_read_optional(args.sequences),
        assets=_read_optional(args.assets),
    )

    text = json.dumps(run.to_payload(), indent=2, ensure_ascii=False)
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text + "\n", encoding="utf-8")
        _print_run_summary(run, args.output)
    else:
        print(text)
    return 0 if run.success else 2


async def _cmd_stats(args: argparse.Namespace) -> int:
    """Display script statistics without calling any model."""
    from prodanalyzer.core.source import load_json_file, script_stats, validate_source

    file_path: Path = args.file
    if not file_path.exists():
        logger.error("File not found: %s", file_path)
        return 1

    stats = script_stats(validate_source(load_json_file(file_path)))
    print(f"\nStatistics for {file_path.name}:")
    print(f"  Scenes:           {stats.total_scenes}")
    print(f"  Locations:        {len(stats.locations)}")
    print(f"  Characters:       {len(stats.characters)}")
    print(f"  Times of day:     {', '.join(stats.times_of_day) or '-'}")
    print(f"  Shooting days:    {stats.estimated_shooting_days}")
    print(f"  Complexity score: {stats.complexity_score}")
    return 0


async def _cmd_pipelines(args: argparse.Namespace) -> int:
    """List registered pipelines and their stages."""
    from prodanalyzer.api.facade import list_pipelines

    for info in list_pipelines():
        print(f"\n{info.name}: {info.description}")
        for index, stage in enumerate(info.stages, start=1):
            deps = f"  (after {', '.join(stage.dependencies)})" if stage.dependencies else ""
            print(f"  {index}. {stage.name:<22} {stage.description}{deps}")
    return 0


def _print_run_summary(run: PipelineRun, output: Path) -> None:
    """Print a human-readable summary of a PipelineRun."""
    print(f"\nAnalysis {'complete' if run.success else 'failed'}:")
    print(f"  Pipeline:   {run.pipeline}")
    print(f"  Run ID:     {run.run_id}")
    print(f"  Stages:     {len(run.completed_stages)}/{len(run.stages)} completed")
    for name in run.failed_stages:
        print(f"    - {name}: {run.stages[name].error}")
    if run.error:
        print(f"  Error:      {run.error}")
    print(f"  Time:       {run.processing_time_ms}ms")
    print(f"  Output:     {output}")


def _setup_logging(verbose: bool) -> Settings:
    """Load Settings and configure logging for CLI usage from them."""
    from prodanalyzer.config.settings import Settings
    from prodanalyzer.logging.logger import setup_logging

    settings = Settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    return settings


if __name__ == "__main__":
    sys.exit(main())
