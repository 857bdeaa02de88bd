from __future__ import annotations

import re
from typing import Any

import eth_utils as eth
from pydantic import BaseModel, ConfigDict, field_validator

from claimer.models.Participant import BYTES32_RE
from claimer.models.types import Bytes32, EthereumAddress

DECIMAL_RE = re.compile(r"[0-9]+")


class ClaimEntry(BaseModel):
    """
    One entitlement inside a batch, as read from the proof file.
    :param `batchId`: the committed merkle root this entry belongs to
    :param `amount`: exact entitlement in the token's smallest unit, must match the hashed leaf
    :param `proof`: sibling hashes ordered from leaf to root
    """

    model_config = ConfigDict(frozen=True)

    batchId: int
    token: EthereumAddress
    account: EthereumAddress
    amount: int
    proof: tuple[Bytes32, ...]

    @field_validator("batchId", mode="before")
    @classmethod
    def parse_batch_id(cls, batch_id: Any) -> int:
        # bytes32 ids are accepted and read as big endian integers
        if isinstance(batch_id, str) and BYTES32_RE.match(batch_id):
            return int(batch_id, 16)
        if isinstance(batch_id, bool) or not isinstance(batch_id, int):
            raise ValueError(f"batchId must be an integer, got {batch_id!r}")
        if batch_id < 0 or batch_id >= 2**256:
            raise ValueError(f"batchId out of range: {batch_id}")
        return batch_id

    @field_validator("token", "account")
    @classmethod
    def checksum_address(cls, addr: str) -> str:
        if not eth.is_address(addr):
            raise ValueError(f"Invalid address {addr}")
        return eth.to_checksum_address(addr)

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, amount: Any) -> int:
        if isinstance(amount, str) and DECIMAL_RE.fullmatch(amount.strip()):
            amount = int(amount.strip())
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValueError(f"amount must be a non-negative integer, got {amount!r}")
        if amount < 0 or amount >= 2**256:
            raise ValueError(f"amount out of range: {amount}")
        return amount

    @field_validator("proof")
    @classmethod
    def bytes32_hashes(cls, proof: tuple[str, ...]) -> tuple[str, ...]:
        for node in proof:
            if not BYTES32_RE.match(node):
                raise ValueError(f"Proof node must be 32 bytes of hex, got {node}")
        return tuple(node.lower() for node in proof)

    @property
    def key(self) -> tuple[int, EthereumAddress, EthereumAddress]:
        """Unique within a well formed proof file"""
        return (self.batchId, self.account, self.token)

    def to_file_dict(self) -> dict[str, Any]:
        """Serialize back to the proof file format"""
        return {
            "batchId": self.batchId,
            "token": self.token,
            "account": self.account,
            "amount": str(self.amount),
            "proof": list(self.proof),
        }
