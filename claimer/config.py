from typing import Any

from pydantic import ValidationError

from claimer.env import ENV, env_var
from claimer.errors import BadConfigException, MissingEnvironmentVariableException
from claimer.models import RunConfig

# RunConfig field -> environment variable
ENV_FIELDS = {
    "rpc_url": ENV.RPC_URL,
    "distributor_address": ENV.DISTRIBUTOR_ADDRESS,
    "registry_address": ENV.REGISTRY_ADDRESS,
    "operator_private_key": ENV.OPERATOR_PRIVATE_KEY,
    "proofs_file": ENV.PROOFS_FILE,
    "seed_count": ENV.SEED_COUNT,
    "role_mask": ENV.ROLE_MASK,
    "progress_every": ENV.PROGRESS_EVERY,
    "reports_dir": ENV.REPORTS_DIR,
    "call_timeout": ENV.CALL_TIMEOUT,
    "concurrency": ENV.CONCURRENCY,
    "nonce_mode": ENV.NONCE_MANAGER,
}


def _env_name(loc: tuple) -> str:
    return ENV_FIELDS.get(loc[0], str(loc[0])) if loc else "config"


def load_config(**overrides: Any) -> RunConfig:
    """
    Reads the run settings from the environment (and `.env`).
    Keyword overrides, eg: from the command line, win over the environment when not None
    """
    values: dict[str, Any] = {}
    for field, accessor in ENV_FIELDS.items():
        var = env_var(accessor, required=False)
        if var is not None:
            values[field] = var

    values.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return RunConfig(**values)
    except ValidationError as e:
        # name the environment variable, never echo the value
        problems = [f"{_env_name(err['loc'])}: {err['msg']}" for err in e.errors()]
        raise BadConfigException("; ".join(problems)) from e


def require(conf: RunConfig, *fields: str) -> None:
    """Throw if any of `fields` was not configured, naming the environment variable"""
    for field in fields:
        if not getattr(conf, field):
            raise MissingEnvironmentVariableException(ENV_FIELDS[field])
