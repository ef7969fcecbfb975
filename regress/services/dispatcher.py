import logging
from dataclasses import replace
from pathlib import Path

import psutil

from regress.errors import SubmissionError
from regress.models import RegressionResult, RunSummary, SubmitResult, TestCaseSpec
from regress.services.backends import Backend
from regress.services.poller import CompletionPoller, count_artifacts, list_artifacts
from regress.utils.jobs import ASM_DIR, build_job
from regress.utils.testlist import read_testlist, select_tests

logger = logging.getLogger(__name__)


class Dispatcher:
    """Runs a regression: parse the testlist, submit jobs, wait for results."""

    def __init__(
        self,
        backend: Backend,
        out_dir: Path,
        poller: CompletionPoller | None = None,
        seed: int | None = None,
    ):
        self.backend = backend
        self.out_dir = Path(out_dir)
        self.asm_dir = self.out_dir / ASM_DIR
        self.poller = poller or CompletionPoller()
        self.seed = seed

    def enabled_tests(
        self, testlist: Path, test: str = "all", iterations: int | None = None
    ) -> list[TestCaseSpec]:
        """Parse the testlist and drop entries with zero iterations."""
        specs = []
        for spec in select_tests(read_testlist(testlist), test=test, iterations=iterations):
            if spec.iteration_count == 0:
                logger.debug(f"Skipping disabled test {spec.name}")
                continue
            specs.append(spec)
        return specs

    def submit_all(self, specs: list[TestCaseSpec]) -> list[SubmitResult]:
        """Build and submit one job per spec, in testlist order.

        Each job is built right before it is submitted so its seed is sampled
        at that moment. A job that cannot be submitted is recorded and the
        run continues.
        """
        results = []
        for spec in specs:
            job = build_job(spec, self.out_dir, seed=self.seed)
            try:
                result = self.backend.submit(job)
            except SubmissionError as e:
                logger.error(f"Submission failed for {job.test_name}: {e}")
                result = SubmitResult(job=job, accepted=False, error=str(e))
            results.append(result)
        return results

    def _log_start(self, testlist: Path, specs: list[TestCaseSpec]):
        memory = psutil.virtual_memory()
        logger.info("=" * 60)
        logger.info(f"Regression: {testlist}")
        logger.info(f"  Backend: {self.backend.name}")
        logger.info(f"  Output dir: {self.out_dir}")
        logger.info(f"  Jobs: {len(specs)}")
        logger.info(f"  Tests requested: {sum(spec.iteration_count for spec in specs)}")
        logger.info(f"  CPU cores: {psutil.cpu_count()}")
        logger.info(f"  Available memory: {memory.available / (1024**3):.1f} GB")
        logger.info("=" * 60)

    def run(
        self,
        testlist: Path,
        test: str = "all",
        iterations: int | None = None,
        timeout_cycles: int = 360,
    ) -> RegressionResult:
        """Run the whole regression and report the generated tests.

        Args:
            testlist: Path to the testlist file.
            test: "all" or comma separated test names to run.
            iterations: Override for every test's iteration count.
            timeout_cycles: Poll cycle budget for queued jobs.
        """
        specs = self.enabled_tests(testlist, test=test, iterations=iterations)
        self.asm_dir.mkdir(parents=True, exist_ok=True)
        self._log_start(testlist, specs)

        submitted = self.submit_all(specs)
        accepted = [r.job for r in submitted if r.accepted]
        # failed submissions stay in the totals and never complete
        summary = RunSummary.for_jobs([r.job for r in submitted])

        if self.backend.is_async and accepted:
            summary = self.poller.poll(accepted, self.asm_dir, timeout_cycles, summary=summary)
        else:
            summary = replace(
                summary,
                completed_jobs=sum(1 for r in submitted if r.accepted and r.exit_status == 0),
                artifacts_observed=count_artifacts(self.asm_dir),
            )

        artifacts = list_artifacts(self.asm_dir)
        logger.info(f"Generated {len(artifacts)} tests:")
        for path in artifacts:
            logger.info(f"  {path}")

        result = RegressionResult(submitted=submitted, summary=summary, artifacts=artifacts)
        if result.failed_submissions:
            logger.warning(f"{len(result.failed_submissions)} jobs failed to submit")
        return result
