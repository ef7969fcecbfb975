"""Build jobs from testlist entries."""

import time
from pathlib import Path
from typing import Callable

from regress.models import Job, TestCaseSpec

ASM_DIR = "asm_tests"


def log_path_for(out_dir: Path, test_name: str) -> Path:
    return Path(out_dir) / f"sim_{test_name}.log"


def artifact_prefix_for(out_dir: Path, test_name: str) -> Path:
    return Path(out_dir) / ASM_DIR / test_name


def build_job(
    spec: TestCaseSpec,
    out_dir: Path,
    seed: int | None = None,
    clock: Callable[[], float] = time.time,
) -> Job:
    """Assemble a Job for one testlist entry.

    The seed is sampled from wall-clock seconds at build time unless a fixed
    seed is given. Jobs built within the same second get the same seed.

    Args:
        spec: Parsed testlist entry.
        out_dir: Regression output directory.
        seed: Fixed seed to use instead of the clock.
        clock: Time source, returning seconds.
    """
    if seed is None:
        seed = int(clock())

    return Job(
        test_name=spec.name,
        seed=seed,
        log_path=log_path_for(out_dir, spec.name),
        artifact_prefix=artifact_prefix_for(out_dir, spec.name),
        iteration_count=spec.iteration_count,
        options=spec.extra_options,
    )
