import sys
from typing import Callable, Optional

import fire

from claimer.errors import (
    BadConfigException,
    FatalInfrastructureError,
    FormatError,
    MissingEnvironmentVariableException,
)
from claimer.models import BatchAttemptReport
from claimer.run_claims import run_claims
from claimer.run_seed import run_reseed, run_seed

# conditions that invalidate the whole run, anything per entry is in the report instead
FATAL_ERRORS = (
    FormatError,
    FatalInfrastructureError,
    BadConfigException,
    MissingEnvironmentVariableException,
)


def _exit(job: Callable[[], BatchAttemptReport]) -> None:
    """Exit 0 once dispatch completed, whatever the per entry outcomes, and 1 on fatal errors"""
    try:
        job()
    except FATAL_ERRORS as e:
        print(f"💀 {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(0)


def claim(proofs: Optional[str] = None) -> None:
    """Claim every entry of a proof file (default `PROOFS_FILE`)"""
    _exit(lambda: run_claims(proofs))


def seed(count: Optional[int] = None) -> None:
    """Register `count` (default `SEED_COUNT`) new publishers"""
    _exit(lambda: run_seed(count))


def reseed() -> None:
    """Register the journaled identities that are still missing"""
    _exit(run_reseed)


def main() -> None:
    fire.Fire({"claim": claim, "seed": seed, "reseed": reseed})
