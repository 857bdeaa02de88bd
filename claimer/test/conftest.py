import json
from pathlib import Path
from typing import Any, Callable

import pytest

from claimer.models import ClaimEntry
from claimer.test.fakes import TOKEN, address, build_batch

STUBS = Path(__file__).parent / "stubs"


@pytest.fixture()
def ADDRESSES() -> list[str]:
    return [address(i) for i in range(1, 6)]


@pytest.fixture()
def batch(ADDRESSES) -> tuple[str, list[dict[str, Any]]]:
    """Batch 7 paying 100, 200, ... 500 units of the token to each address"""
    return build_batch(7, TOKEN, [(a, (i + 1) * 100) for i, a in enumerate(ADDRESSES)])


@pytest.fixture()
def entries(batch) -> list[ClaimEntry]:
    return [ClaimEntry(**e) for e in batch[1]]


@pytest.fixture()
def write_proofs(tmp_path) -> Callable[[Any], str]:
    """Writes data as a proof file in a temporary directory, returns the path"""

    def write(data: Any, name: str = "proofs.json") -> str:
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return str(path)

    return write


@pytest.fixture(autouse=True)
def no_dotenv_leak(monkeypatch):
    # runs must only see the variables a test sets
    for var in (
        "RPC_URL",
        "DISTRIBUTOR_ADDRESS",
        "REGISTRY_ADDRESS",
        "PROOFS_FILE",
        "SEED_COUNT",
        "OPERATOR_PRIVATE_KEY",
        "CALL_TIMEOUT",
        "CONCURRENCY",
        "NONCE_MANAGER",
        "PROGRESS_EVERY",
        "ROLE_MASK",
        "REPORTS_DIR",
    ):
        monkeypatch.delenv(var, raising=False)
