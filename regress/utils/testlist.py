"""Utilities for reading and filtering regression testlists."""

import logging
import re
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Iterator

from regress.models import TestCaseSpec

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "//"

TESTLIST_LINE = re.compile(
    r"^(?P<name>[a-z0-9_-]+)\s*:\s*(?P<iterations>\d+)\s*:\s*(?P<options>.*)$"
)


def parse_line(line: str) -> TestCaseSpec | None:
    """Parse a single testlist line.

    Args:
        line: Raw line from the testlist.

    Returns:
        TestCaseSpec for a well-formed entry, None for blank, comment or
        malformed lines.
    """
    line = line.strip()
    if not line or line.startswith(COMMENT_PREFIX):
        return None

    match = TESTLIST_LINE.match(line)
    if not match:
        logger.debug(f"Skipping malformed testlist line: {line!r}")
        return None

    return TestCaseSpec(
        name=match.group("name"),
        iteration_count=int(match.group("iterations")),
        extra_options=match.group("options"),
    )


def parse_testlist(lines: Iterable[str]) -> Iterator[TestCaseSpec]:
    """Lazily yield a TestCaseSpec for every well-formed line, in order."""
    for line in lines:
        spec = parse_line(line)
        if spec is not None:
            yield spec


def read_testlist(path: Path) -> Iterator[TestCaseSpec]:
    """Read a testlist file and yield its entries.

    Raises:
        FileNotFoundError: If the testlist does not exist.
        UnicodeDecodeError: If the testlist is not UTF-8 text.
    """
    path = Path(path)
    logger.info(f"Processing regression test list: {path}")
    with open(path, encoding="utf-8") as f:
        yield from parse_testlist(f)


def select_tests(
    specs: Iterable[TestCaseSpec],
    test: str = "all",
    iterations: int | None = None,
) -> Iterator[TestCaseSpec]:
    """Filter specs by test name and optionally override iteration counts.

    Args:
        specs: Parsed testlist entries.
        test: "all", or a comma separated list of test names to keep.
        iterations: If set, replaces the iteration count of every enabled spec.
    """
    wanted = None if test == "all" else {t.strip() for t in test.split(",") if t.strip()}

    for spec in specs:
        if wanted is not None and spec.name not in wanted:
            continue
        if iterations is not None and spec.iteration_count > 0:
            spec = replace(spec, iteration_count=iterations)
        yield spec
