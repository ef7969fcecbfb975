"""Execution backends: blocking local processes or AWS Batch submission."""

import logging
import os
import subprocess

from regress.config import RegressionConfig
from regress.errors import ConfigError, SubmissionError
from regress.models import Job, SubmitResult

logger = logging.getLogger(__name__)


class Backend:
    """Runs a Job, either to completion or by handing it to a queue."""

    name = "base"
    is_async = False

    def __init__(self, gen_cmd: str, verbose: bool = False):
        self.gen_cmd = gen_cmd
        self.verbose = verbose

    def submit(self, job: Job) -> SubmitResult:
        raise NotImplementedError

    def command(self, job: Job) -> list[str]:
        """Render the generator command for a job.

        Raises:
            SubmissionError: If the command cannot be rendered.
        """
        try:
            return job.render(self.gen_cmd)
        except (ValueError, KeyError, IndexError) as e:
            raise SubmissionError(f"Cannot build command for {job.test_name}: {e}") from e


class LocalBackend(Backend):
    """Runs each job as a local process and blocks until it exits.

    There is no timeout: a hung generator hangs the whole run.
    """

    name = "local"
    is_async = False

    def submit(self, job: Job) -> SubmitResult:
        cmd = self.command(job)
        sink = None if self.verbose else subprocess.DEVNULL
        env = {**os.environ, **job.parameters()}

        logger.info(f"Running {job.test_name} (seed={job.seed}, iterations={job.iteration_count})")
        logger.debug(f"Running command: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, stdout=sink, stderr=sink, env=env)
        except OSError as e:
            raise SubmissionError(f"Failed to start {job.test_name}: {e}") from e

        if result.returncode != 0:
            logger.warning(f"{job.test_name} exited with status {result.returncode}")

        return SubmitResult(job=job, accepted=True, exit_status=result.returncode)


class BatchQueueBackend(Backend):
    """Submits jobs to AWS Batch and returns once the queue accepts them.

    After submission the only view of a job is the log file it writes.
    """

    name = "batch"
    is_async = True

    def __init__(self, gen_cmd: str, batch_client, verbose: bool = False):
        super().__init__(gen_cmd, verbose=verbose)
        self.batch_client = batch_client

    def submit(self, job: Job) -> SubmitResult:
        command = self.command(job)
        environment = job.parameters()
        if self.verbose:
            environment["VERBOSE"] = "1"

        response = self.batch_client.submit_job(
            job_name=f"regress-{job.test_name}",
            environment=environment,
            command=command,
        )
        job_id = response["jobId"]

        logger.info(f"Submitted {job.test_name} to {self.batch_client.job_queue}: {job_id}")
        if self.verbose:
            logger.info(f"Batch response for {job.test_name}: {response}")
        else:
            logger.debug(f"Batch response for {job.test_name}: {response}")

        return SubmitResult(job=job, accepted=True, batch_job_id=job_id)


def create_backend(config: RegressionConfig) -> Backend:
    """Select the execution backend named by the config.

    Raises:
        ConfigError: If the backend name is not recognized.
    """
    if config.backend == LocalBackend.name:
        return LocalBackend(config.gen_cmd, verbose=config.verbose)

    if config.backend == BatchQueueBackend.name:
        from regress.aws import BatchClient

        client = BatchClient(
            job_queue=config.job_queue,
            job_definition=config.job_definition,
            region=config.region,
        )
        return BatchQueueBackend(config.gen_cmd, client, verbose=config.verbose)

    raise ConfigError(
        f"Unknown backend {config.backend!r}, expected "
        f"{LocalBackend.name!r} or {BatchQueueBackend.name!r}"
    )
