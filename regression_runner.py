#!/usr/bin/env python3
"""
Regression runner for the instruction-stream generator.

Run with: python regression_runner.py --testlist testlist.txt

Environment variables (flags take precedence):
    REGRESS_BACKEND         - "local" or "batch" (default: local)
    REGRESS_OUT_DIR         - Output directory (default: out)
    REGRESS_GEN_CMD         - Generator command template
    REGRESS_TIMEOUT_CYCLES  - Poll cycles before giving up (default: 360)
    REGRESS_CYCLE_PERIOD    - Seconds between poll cycles (default: 10)
    REGRESS_SEED            - Fixed seed for every job (default: per-job clock seed)
    REGRESS_VERBOSE         - Show generator output (default: false)
    AWS_REGION              - AWS region (default: us-west-2)
    AWS_BATCH_JOB_QUEUE     - Batch job queue
    AWS_BATCH_JOB_DEF       - Batch job definition
"""
import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from regress import create_dispatcher
from regress.config import RegressionConfig
from regress.errors import ConfigError

logger = logging.getLogger("regression-runner")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def setup_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for logger_name in ["urllib3", "botocore", "boto3"]:
        logging.getLogger(logger_name).setLevel(logging.DEBUG if verbose else logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dispatch generator regression jobs")
    parser.add_argument("--testlist", required=True, type=Path, help="Regression testlist file")
    parser.add_argument("--test", default="all", help="Test name(s) to run, comma separated (default: all)")
    parser.add_argument("--iterations", type=int, help="Override iteration count of every test")
    parser.add_argument("--backend", help="Execution backend: local or batch")
    parser.add_argument("-o", "--out-dir", type=Path, help="Output directory")
    parser.add_argument("--seed", type=int, help="Fixed seed for every job")
    parser.add_argument("--timeout-cycles", type=int, help="Poll cycles before giving up")
    parser.add_argument("--cycle-period", type=float, help="Seconds between poll cycles")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show generator output and debug logs")
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> RegressionConfig:
    """Read the environment config and apply command line overrides."""
    config = RegressionConfig.from_env()
    overrides = {
        "backend": args.backend,
        "out_dir": args.out_dir,
        "seed": args.seed,
        "timeout_cycles": args.timeout_cycles,
        "cycle_period": args.cycle_period,
    }
    config = replace(config, **{k: v for k, v in overrides.items() if v is not None})
    if args.verbose:
        config.verbose = True
    config.validate()
    return config


def main(argv: list[str] | None = None) -> int:
    """Entry point for the regression runner."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = load_config(args)
        dispatcher = create_dispatcher(config)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_CONFIG

    try:
        result = dispatcher.run(
            args.testlist,
            test=args.test,
            iterations=args.iterations,
            timeout_cycles=config.timeout_cycles,
        )
    except FileNotFoundError as e:
        logger.error(f"Testlist not found: {e}")
        return EXIT_CONFIG
    except UnicodeDecodeError as e:
        logger.error(f"Testlist {args.testlist} is not valid UTF-8: {e}")
        return EXIT_CONFIG

    summary = result.summary
    logger.info("=" * 60)
    logger.info(f"Jobs completed: {summary.completed_jobs}/{summary.total_jobs}")
    logger.info(f"Tests generated: {summary.artifacts_observed}/{summary.total_artifacts_expected}")
    if summary.timed_out:
        logger.error(f"Regression timed out after {summary.elapsed_cycles} cycles")
    if summary.cancelled:
        logger.warning("Regression cancelled")
    logger.info("=" * 60)

    return EXIT_OK if result.succeeded else EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
