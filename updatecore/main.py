"""Command line entry point for updatecore."""

import argparse
import os
import sys
import time
from pathlib import Path
from typing import List, Optional, TextIO

from dotenv import load_dotenv

from updatecore import __version__
from updatecore.config.environment import EnvironmentConfig, load_environment_config
from updatecore.config.exceptions import ConfigurationError, ManifestDecodeError
from updatecore.config.loader import dump_manifest, validate_manifest_file
from updatecore.config.models import LogFormat, LogLevel
from updatecore.crawlers.exceptions import CrawlerError
from updatecore.engine import Engine
from updatecore.logging import get_logger
from updatecore.logging.config import configure_logging
from updatecore.pipeline import PipelineOptions, Result

logger = get_logger(__name__, component="cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIGURATION_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="updatecore",
        description="Discover dependency update pipelines in a workspace",
    )
    parser.add_argument(
        "--config",
        type=Path,
        action="append",
        default=[],
        help="Pipeline manifest to load (repeatable)",
    )
    parser.add_argument(
        "--experimental",
        action="store_true",
        help="Enable experimental features such as autodiscovery",
    )
    parser.add_argument(
        "--local-autodiscovery",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Add the default local autodiscovery pipeline "
        "(default: enabled only when no --config is given)",
    )
    parser.add_argument(
        "--directory",
        type=Path,
        default=None,
        help="Directory scanned by pipelines without an SCM (default: current directory)",
    )
    parser.add_argument(
        "--scm-root",
        type=Path,
        default=None,
        help="Root directory of SCM working copies (overrides UPDATECORE_WORKDIR)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=[level.value for level in LogLevel],
        help="Log level (overrides environment)",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=[log_format.value for log_format in LogFormat],
        help="Log format (overrides environment)",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Print the YAML of every generated manifest",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Only validate the --config manifests and exit",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_runtime_settings(args: argparse.Namespace) -> EnvironmentConfig:
    """
    Merge environment settings with command line overrides.

    Priority is CLI > environment > defaults. The experimental gate is on
    when either the flag or the environment enables it.

    Raises:
        ConfigurationError: If environment variables are invalid
    """
    env_config = load_environment_config()

    env_config.log_level = args.log_level or env_config.log_level or "INFO"
    env_config.log_format = args.log_format or env_config.log_format or "key-value"
    env_config.experimental = args.experimental or env_config.experimental
    if args.scm_root:
        env_config.workdir = args.scm_root

    return env_config


def print_summary(engine: Engine, out: TextIO = sys.stdout) -> None:
    """Print one line per pipeline with its outcome."""
    symbols = {Result.SUCCESS: "✔", Result.FAILURE: "✗", Result.UNSET: "-"}
    print(f"\n{'=' * 80}\n Pipelines\n{'=' * 80}", file=out)
    for pipeline in engine.pipelines:
        report = pipeline.report
        print(
            f"  {symbols[report.result]} {pipeline.name or '<unnamed>'} "
            f"({pipeline.pipeline_id[:12]})",
            file=out,
        )
        for error in report.errors:
            print(f"      {error}", file=out)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code: 0 on success, 1 if a pipeline failed or discovery aborted,
        2 on configuration errors.
    """
    load_dotenv()
    start_time = time.time()
    args = build_parser().parse_args(argv)

    if args.validate:
        if not args.config:
            print("--validate requires at least one --config", file=sys.stderr)
            return EXIT_CONFIGURATION_ERROR
        results = [validate_manifest_file(path) for path in args.config]
        return EXIT_OK if all(results) else EXIT_CONFIGURATION_ERROR

    try:
        env_config = load_runtime_settings(args)
        configure_logging(
            level=env_config.log_level,
            format_type=env_config.log_format,
            environment=os.environ.get("ENVIRONMENT", "local"),
        )

        logger.info(
            "updatecore starting",
            extra={
                "event": "service.starting",
                "version": __version__,
                "manifest_count": len(args.config),
                "experimental": env_config.experimental,
            },
        )

        engine = Engine(PipelineOptions(workdir=env_config.workdir))
        load_errors = engine.load_manifests(args.config)
        loaded_count = len(engine.pipelines)

        bootstrap_enabled = (
            args.local_autodiscovery
            if args.local_autodiscovery is not None
            else not args.config
        )

        try:
            result = engine.load_autodiscovery(
                default_enabled=bootstrap_enabled,
                experimental=env_config.experimental,
                working_dir=args.directory,
            )
        except (CrawlerError, ManifestDecodeError) as e:
            print_summary(engine)
            print(f"Autodiscovery aborted: {e}", file=sys.stderr)
            return EXIT_FAILURE

        print_summary(engine)

        if args.show:
            for pipeline in engine.generated_pipelines(loaded_count):
                if pipeline.config.has_autodiscovery:
                    continue
                print("---")
                print(dump_manifest(pipeline.config), end="")

        failed = any(p.report.failed for p in engine.pipelines)

        logger.info(
            "updatecore finished",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
                "pipeline_count": len(engine.pipelines),
                "generated_count": result.total_generated,
                "discovery_skipped": result.skipped,
                "failed": failed,
            },
        )

        return EXIT_FAILURE if failed or load_errors else EXIT_OK

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e.message}",
            extra={"event": "config.error", "error_type": type(e).__name__},
        )
        return EXIT_CONFIGURATION_ERROR
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
