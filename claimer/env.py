import os
from typing import Optional

from dotenv import load_dotenv

from claimer.errors import MissingEnvironmentVariableException

load_dotenv()


def env_var(accessor: str, required: bool = True) -> Optional[str]:
    """
    Attempt to fetch an environment variable and throw
    an error if not found and `required` is set
    """
    var = os.environ.get(accessor)
    if not var and required:
        raise MissingEnvironmentVariableException(accessor)
    return var or None


class ENV:
    """Names of the environment variables recognized by the claimer"""

    RPC_URL = "RPC_URL"
    DISTRIBUTOR_ADDRESS = "DISTRIBUTOR_ADDRESS"
    REGISTRY_ADDRESS = "REGISTRY_ADDRESS"
    PROOFS_FILE = "PROOFS_FILE"
    SEED_COUNT = "SEED_COUNT"
    OPERATOR_PRIVATE_KEY = "OPERATOR_PRIVATE_KEY"
    CALL_TIMEOUT = "CALL_TIMEOUT"
    CONCURRENCY = "CONCURRENCY"
    NONCE_MANAGER = "NONCE_MANAGER"
    PROGRESS_EVERY = "PROGRESS_EVERY"
    ROLE_MASK = "ROLE_MASK"
    REPORTS_DIR = "REPORTS_DIR"
