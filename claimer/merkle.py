"""
Merkle proofs for payout batches.

Leaves are `keccak256(abi.encodePacked(address account, address token, uint256 amount))`
and each parent hashes its two children in sorted order, so a proof is just the list of
sibling hashes from the leaf up to the root.
"""

from typing import Sequence

import eth_utils as eth

from claimer.models import Bytes32, ClaimEntry


def to_bytes32(value: Bytes32) -> bytes:
    return bytes.fromhex(value[2:])


def leaf(entry: ClaimEntry) -> bytes:
    return eth.keccak(
        eth.to_bytes(hexstr=entry.account)
        + eth.to_bytes(hexstr=entry.token)
        + entry.amount.to_bytes(32, "big")
    )


def hash_pair(a: bytes, b: bytes) -> bytes:
    return eth.keccak(a + b) if a < b else eth.keccak(b + a)


def compute_root(node: bytes, proof: Sequence[Bytes32]) -> bytes:
    for sibling in proof:
        node = hash_pair(node, to_bytes32(sibling))
    return node


def verify(entry: ClaimEntry, root: Bytes32) -> bool:
    """True if the entry's proof leads from its leaf to `root`"""
    return compute_root(leaf(entry), entry.proof) == to_bytes32(root.lower())
