from __future__ import annotations

from enum import Enum
from typing import Optional

import eth_utils as eth
from pydantic import BaseModel, Field, field_validator, model_validator

from claimer.errors import BadConfigException
from claimer.models.Participant import ROLE_PUBLISHER
from claimer.models.types import EthereumAddress


class NonceMode(str, Enum):
    """
    :state SEQUENTIAL: one submission in flight, the node assigns the pending nonce
    :state EXPLICIT: nonces are handed out locally before dispatch
    """

    SEQUENTIAL = "sequential"
    EXPLICIT = "explicit"


class RunConfig(BaseModel):
    """
    Settings for a single claim or seeding run.
    Built from the environment by `claimer.config.load_config`
    """

    rpc_url: Optional[str] = None
    distributor_address: Optional[EthereumAddress] = None
    registry_address: Optional[EthereumAddress] = None
    operator_private_key: Optional[str] = Field(default=None, repr=False)

    proofs_file: str = "./proofs.json"
    seed_count: int = 200
    role_mask: int = ROLE_PUBLISHER
    progress_every: int = 20
    reports_dir: str = "reports"

    # seconds allowed for each remote call, including confirmation
    call_timeout: float = 120
    concurrency: int = 1
    nonce_mode: NonceMode = NonceMode.SEQUENTIAL

    @field_validator("distributor_address", "registry_address")
    @classmethod
    def checksum_address(cls, addr: Optional[str]) -> Optional[str]:
        if not addr:
            return None
        if not eth.is_address(addr):
            raise BadConfigException(f"Invalid contract address {addr}")
        return eth.to_checksum_address(addr)

    @field_validator("call_timeout")
    @classmethod
    def positive_timeout(cls, timeout: float) -> float:
        if timeout <= 0:
            raise BadConfigException("Call timeout must be positive")
        return timeout

    @field_validator("seed_count")
    @classmethod
    def non_negative_count(cls, count: int) -> int:
        if count < 0:
            raise BadConfigException("Seed count cannot be negative")
        return count

    @field_validator("progress_every")
    @classmethod
    def positive_cadence(cls, every: int) -> int:
        if every < 1:
            raise BadConfigException("Progress cadence must be at least 1")
        return every

    @field_validator("role_mask")
    @classmethod
    def non_empty_mask(cls, mask: int) -> int:
        if mask <= 0:
            raise BadConfigException("Role mask must grant at least one role")
        return mask

    @model_validator(mode="after")
    def concurrency_needs_nonces(self) -> RunConfig:
        if self.concurrency < 1:
            raise BadConfigException("Concurrency must be at least 1")
        if self.concurrency > 1 and self.nonce_mode != NonceMode.EXPLICIT:
            raise BadConfigException(
                "Concurrency above 1 requires the explicit nonce manager"
            )
        return self
