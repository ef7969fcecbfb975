"""Data models for regression dispatch."""

import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence


@dataclass(frozen=True)
class TestCaseSpec:
    """One entry of a testlist."""

    __test__ = False  # not a pytest class

    name: str
    iteration_count: int
    extra_options: str = ""


@dataclass(frozen=True)
class Job:
    """A fully parameterized unit of work for an execution backend."""

    test_name: str
    seed: int
    log_path: Path
    artifact_prefix: Path
    iteration_count: int
    options: str = ""

    def parameters(self) -> dict[str, str]:
        """Invocation parameters handed to the generator process."""
        return {
            "TEST_NAME": self.test_name,
            "ASM_PREFIX": str(self.artifact_prefix),
            "SEED": str(self.seed),
            "NUM_OF_TESTS": str(self.iteration_count),
            "GEN_OPTS": self.options,
            "LOG_PATH": str(self.log_path),
        }

    def render(self, template: str) -> list[str]:
        """Format a command template with this job's parameters.

        Available fields: {test}, {prefix}, {seed}, {iterations}, {options}, {log}.
        Paths are quoted so each stays one argument; options are split into
        separate arguments.

        Raises:
            ValueError: If the rendered command has unbalanced quotes.
        """
        command = template.format(
            test=shlex.quote(self.test_name),
            prefix=shlex.quote(str(self.artifact_prefix)),
            seed=self.seed,
            iterations=self.iteration_count,
            options=self.options,
            log=shlex.quote(str(self.log_path)),
        )
        return shlex.split(command)


@dataclass(frozen=True)
class RunSummary:
    """Snapshot of regression progress."""

    total_jobs: int = 0
    completed_jobs: int = 0
    total_artifacts_expected: int = 0
    artifacts_observed: int = 0
    elapsed_cycles: int = 0
    timed_out: bool = False
    cancelled: bool = False

    @classmethod
    def for_jobs(cls, jobs: Sequence[Job]) -> "RunSummary":
        """Starting snapshot with totals covering every built job."""
        return cls(
            total_jobs=len(jobs),
            total_artifacts_expected=sum(job.iteration_count for job in jobs),
        )

    @property
    def all_done(self) -> bool:
        return self.completed_jobs >= self.total_jobs


@dataclass
class SubmitResult:
    """Outcome of submitting one job."""

    job: Job
    accepted: bool
    exit_status: int | None = None
    batch_job_id: str | None = None
    error: str | None = None


@dataclass
class RegressionResult:
    """Final report of a regression run."""

    submitted: list[SubmitResult] = field(default_factory=list)
    summary: RunSummary = field(default_factory=RunSummary)
    artifacts: list[Path] = field(default_factory=list)

    @property
    def failed_submissions(self) -> list[SubmitResult]:
        return [r for r in self.submitted if not r.accepted]

    @property
    def succeeded(self) -> bool:
        if self.failed_submissions:
            return False
        if any(r.exit_status not in (None, 0) for r in self.submitted):
            return False
        return self.summary.all_done and not self.summary.timed_out
