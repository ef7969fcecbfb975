"""Run configuration read from environment variables."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from regress.errors import ConfigError

DEFAULT_GEN_CMD = (
    "./vcs_simv +UVM_TESTNAME={test} +num_of_tests={iterations} "
    "+asm_file_name={prefix} +ntb_random_seed={seed} {options} -l {log}"
)

DEFAULT_TIMEOUT_CYCLES = 360
DEFAULT_CYCLE_PERIOD = 10.0


def _env_int(name: str, default: int | None) -> int | None:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigError(f"Environment variable {name} must be an integer, got {value!r}") from e


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigError(f"Environment variable {name} must be a number, got {value!r}") from e


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes", "on")


@dataclass
class RegressionConfig:
    """Settings for one regression run."""

    backend: str = "local"
    out_dir: Path = field(default_factory=lambda: Path("out"))
    gen_cmd: str = DEFAULT_GEN_CMD
    timeout_cycles: int = DEFAULT_TIMEOUT_CYCLES
    cycle_period: float = DEFAULT_CYCLE_PERIOD
    seed: int | None = None
    verbose: bool = False

    # AWS Batch
    region: str = "us-west-2"
    job_queue: str = "riscv-dv-regression-queue"
    job_definition: str = "riscv-dv-generator"

    @classmethod
    def from_env(cls) -> "RegressionConfig":
        """Build a config from REGRESS_* and AWS_* environment variables."""
        config = cls(
            backend=os.environ.get("REGRESS_BACKEND", "local"),
            out_dir=Path(os.environ.get("REGRESS_OUT_DIR", "out")),
            gen_cmd=os.environ.get("REGRESS_GEN_CMD", DEFAULT_GEN_CMD),
            timeout_cycles=_env_int("REGRESS_TIMEOUT_CYCLES", DEFAULT_TIMEOUT_CYCLES),
            cycle_period=_env_float("REGRESS_CYCLE_PERIOD", DEFAULT_CYCLE_PERIOD),
            seed=_env_int("REGRESS_SEED", None),
            verbose=_env_bool("REGRESS_VERBOSE"),
            region=os.environ.get("AWS_REGION", "us-west-2"),
            job_queue=os.environ.get("AWS_BATCH_JOB_QUEUE", "riscv-dv-regression-queue"),
            job_definition=os.environ.get("AWS_BATCH_JOB_DEF", "riscv-dv-generator"),
        )
        config.validate()
        return config

    def validate(self):
        """Check value ranges.

        Raises:
            ConfigError: If a setting is out of range.
        """
        if self.timeout_cycles < 0:
            raise ConfigError(f"timeout_cycles must be >= 0, got {self.timeout_cycles}")
        if self.cycle_period < 0:
            raise ConfigError(f"cycle_period must be >= 0, got {self.cycle_period}")
