"""AWS Batch client for submitting generator jobs."""

import os
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from regress.errors import SubmissionError

# AWS Batch limit on jobName length
MAX_JOB_NAME = 128


class BatchClient:
    """Client for interacting with AWS Batch."""

    def __init__(
        self,
        job_queue: str | None = None,
        job_definition: str | None = None,
        region: str | None = None,
    ):
        """Initialize the Batch client.

        Args:
            job_queue: Name of the AWS Batch job queue.
            job_definition: Name of the AWS Batch job definition.
            region: AWS region. Defaults to AWS_REGION env var or us-west-2.
        """
        self.region = region or os.environ.get("AWS_REGION", "us-west-2")
        self.job_queue = job_queue or os.environ.get(
            "AWS_BATCH_JOB_QUEUE", "riscv-dv-regression-queue"
        )
        self.job_definition = job_definition or os.environ.get(
            "AWS_BATCH_JOB_DEF", "riscv-dv-generator"
        )

        self.client = boto3.client("batch", region_name=self.region)

    def submit_job(
        self,
        job_name: str,
        environment: dict[str, str],
        command: list[str] | None = None,
    ) -> dict[str, Any]:
        """Submit a generator job to AWS Batch.

        Returns as soon as the queue accepts the job; execution happens on
        the compute environment behind the queue.

        Args:
            job_name: Batch job name (truncated to the Batch limit).
            environment: Variables passed to the container.
            command: Optional container command override.

        Returns:
            The submit_job response, including "jobId".

        Raises:
            SubmissionError: If the queue rejects the job or cannot be reached.
        """
        overrides: dict[str, Any] = {
            "environment": [
                {"name": name, "value": value} for name, value in environment.items()
            ],
        }
        if command:
            overrides["command"] = command

        try:
            return self.client.submit_job(
                jobName=job_name[:MAX_JOB_NAME],
                jobQueue=self.job_queue,
                jobDefinition=self.job_definition,
                containerOverrides=overrides,
            )
        except (ClientError, BotoCoreError) as e:
            raise SubmissionError(f"Failed to submit batch job {job_name}: {e}") from e
