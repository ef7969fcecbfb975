"""Completion polling for jobs submitted to a batch queue."""

import logging
import threading
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from regress.models import Job, RunSummary

logger = logging.getLogger(__name__)

DONE_MARKER = "TEST GENERATION DONE"
ARTIFACT_PATTERN = "*.S"


def is_job_done(job: Job, marker: str = DONE_MARKER) -> bool:
    """Check whether a job's log contains the completion marker.

    A missing or unreadable log means the job is not done yet.
    """
    try:
        with open(job.log_path, encoding="utf-8", errors="replace") as f:
            return any(marker in line for line in f)
    except OSError:
        return False


def count_artifacts(artifact_dir: Path, pattern: str = ARTIFACT_PATTERN) -> int:
    """Count generated files in artifact_dir, across all jobs."""
    return sum(1 for p in Path(artifact_dir).glob(pattern) if p.is_file())


def list_artifacts(artifact_dir: Path, pattern: str = ARTIFACT_PATTERN) -> list[Path]:
    """Return generated files in artifact_dir sorted by name."""
    return sorted(p for p in Path(artifact_dir).glob(pattern) if p.is_file())


class CompletionPoller:
    """Polls job logs and the artifact directory until all jobs are done.

    The loop is single threaded. Between cycles it waits on an Event, so
    cancel() (or Ctrl-C) ends polling early with partial results.
    """

    def __init__(
        self,
        cycle_period: float = 10.0,
        marker: str = DONE_MARKER,
        artifact_pattern: str = ARTIFACT_PATTERN,
        cancel_event: threading.Event | None = None,
    ):
        self.cycle_period = cycle_period
        self.marker = marker
        self.artifact_pattern = artifact_pattern
        self._cancel = cancel_event or threading.Event()

    def cancel(self):
        self._cancel.set()

    def poll_once(self, jobs: Sequence[Job], artifact_dir: Path, summary: RunSummary) -> RunSummary:
        """Inspect every job once and return an updated snapshot."""
        completed = sum(1 for job in jobs if is_job_done(job, self.marker))
        observed = count_artifacts(artifact_dir, self.artifact_pattern)
        return replace(
            summary,
            completed_jobs=max(summary.completed_jobs, completed),
            artifacts_observed=max(summary.artifacts_observed, observed),
        )

    def poll(
        self,
        jobs: Sequence[Job],
        artifact_dir: Path,
        timeout_cycles: int,
        summary: RunSummary | None = None,
    ) -> RunSummary:
        """Poll until every job has written its marker or the budget runs out.

        Args:
            jobs: Submitted jobs.
            artifact_dir: Directory the jobs write generated files into.
            timeout_cycles: Number of waits allowed before giving up.
            summary: Starting snapshot. Its totals may also count jobs that
                were never accepted; polling stops once every job in jobs is done.

        Returns:
            Final RunSummary. timed_out or cancelled is set when polling
            stopped before all jobs completed.
        """
        if summary is None:
            summary = RunSummary.for_jobs(jobs)
        cycle = 0

        while True:
            summary = self.poll_once(jobs, artifact_dir, replace(summary, elapsed_cycles=cycle))
            logger.info(
                f"[{cycle}] Jobs completed: {summary.completed_jobs}/{summary.total_jobs}, "
                f"tests generated: {summary.artifacts_observed}/{summary.total_artifacts_expected}"
            )

            if summary.completed_jobs >= len(jobs):
                logger.info("All submitted jobs completed")
                return summary

            if cycle >= timeout_cycles:
                waited = timeout_cycles * self.cycle_period
                logger.warning(
                    f"Timed out after {timeout_cycles} cycles ({waited:.0f}s): "
                    f"{len(jobs) - summary.completed_jobs} jobs did not report "
                    f"'{self.marker}'"
                )
                return replace(summary, timed_out=True)

            try:
                cancelled = self._cancel.wait(self.cycle_period)
            except KeyboardInterrupt:
                self.cancel()
                cancelled = True

            if cancelled:
                logger.warning(f"Polling cancelled after {cycle} cycles")
                return replace(summary, cancelled=True)

            cycle += 1
