from __future__ import annotations

import re

import eth_utils as eth
from pydantic import BaseModel, ConfigDict, field_validator

from claimer.models.types import Bytes32, EthereumAddress

# role bits, each independently grantable
ROLE_PUBLISHER = 1 << 0
ROLE_APP = 1 << 1
ROLE_ADVERTISER = 1 << 2

BYTES32_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def metadata_tag(label: str) -> Bytes32:
    """Fixed size tag for off-chain correlation, keccak256 of a human readable label"""
    return "0x" + eth.keccak(text=label).hex()


class ParticipantRecord(BaseModel):
    """
    One registry entry
    :param `identity`: the registered address, unique in the registry
    :param `roleMask`: bitfield of granted roles
    :param `payoutAddress`: receives future distributions, may differ from `identity`
    :param `metadataTag`: opaque 32 byte identifier
    """

    model_config = ConfigDict(frozen=True)

    identity: EthereumAddress
    roleMask: int
    payoutAddress: EthereumAddress
    metadataTag: Bytes32

    @field_validator("identity", "payoutAddress")
    @classmethod
    def checksum_address(cls, addr: str) -> str:
        if not eth.is_address(addr):
            raise ValueError(f"Invalid address {addr}")
        return eth.to_checksum_address(addr)

    @field_validator("roleMask")
    @classmethod
    def non_empty_mask(cls, mask: int) -> int:
        if mask <= 0:
            raise ValueError("Role mask must grant at least one role")
        return mask

    @field_validator("metadataTag")
    @classmethod
    def bytes32_tag(cls, tag: str) -> str:
        if not BYTES32_RE.match(tag):
            raise ValueError(f"Metadata tag must be 32 bytes of hex, got {tag}")
        return tag.lower()
