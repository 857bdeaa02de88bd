"""In memory stand-ins for the on-chain distributor and registry"""

import asyncio
import itertools
from typing import Any, Optional

from claimer import merkle
from claimer.errors import RemoteRejection, TransportFailure
from claimer.models import ClaimEntry, ParticipantRecord, metadata_tag


def address(i: int) -> str:
    return "0x" + f"{i:040x}"


TOKEN = "0x" + "a0" * 20


class _Remote:
    """Counts calls and tracks how many are in flight at once"""

    def __init__(self, delay: float = 0):
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0
        self._tx = itertools.count(1)

    async def _enter(self) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(self.delay)

    def _tx_hash(self) -> str:
        return "0x" + f"{next(self._tx):064x}"


class FakeDistributor(_Remote):
    """
    :param `reject`: account -> rejection reason
    :param `unreachable`: accounts whose calls fail in transport
    :param `hang`: accounts whose calls never confirm
    :param `broken`: accounts whose calls raise an unexpected `ValueError`
    """

    def __init__(
        self,
        reject: Optional[dict[str, str]] = None,
        unreachable: tuple[str, ...] = (),
        hang: tuple[str, ...] = (),
        broken: tuple[str, ...] = (),
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.reject = reject or {}
        self.unreachable = set(unreachable)
        self.hang = set(hang)
        self.broken = set(broken)
        self.claimed: set[tuple[int, str]] = set()
        self.calls: list[ClaimEntry] = []

    async def claim(self, entry: ClaimEntry) -> str:
        self.calls.append(entry)
        await self._enter()
        try:
            if entry.account in self.hang:
                await asyncio.sleep(3600)
            if entry.account in self.broken:
                raise ValueError("could not encode claim arguments")
            if entry.account in self.unreachable:
                raise TransportFailure("network", "connection refused")
            if entry.account in self.reject:
                raise RemoteRejection(self.reject[entry.account])
            if (entry.batchId, entry.account) in self.claimed:
                raise RemoteRejection("already-claimed", "Dist: already claimed")
            self.claimed.add((entry.batchId, entry.account))
            return self._tx_hash()
        finally:
            self.in_flight -= 1


class FakeRegistry(_Remote):
    """
    :param `reject`: identity -> rejection reason
    :param `broken`: identities whose calls raise an unexpected `ValueError`
    """

    def __init__(
        self,
        reject: Optional[dict[str, str]] = None,
        broken: tuple[str, ...] = (),
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.reject = reject or {}
        self.broken = set(broken)
        self.registered: dict[str, ParticipantRecord] = {}
        self.calls: list[ParticipantRecord] = []

    async def register(self, record: ParticipantRecord) -> str:
        self.calls.append(record)
        await self._enter()
        try:
            if record.identity in self.broken:
                raise ValueError("could not encode registration arguments")
            if record.identity in self.reject:
                raise RemoteRejection(self.reject[record.identity])
            if record.identity in self.registered:
                raise RemoteRejection("already-registered", "PR: already registered")
            self.registered[record.identity] = record
            return self._tx_hash()
        finally:
            self.in_flight -= 1


def indexed_identity(index: int, role_mask: int) -> ParticipantRecord:
    """Deterministic identity generator, identity `i` is `address(1000 + i)`"""
    return ParticipantRecord(
        identity=address(1000 + index),
        roleMask=role_mask,
        payoutAddress=address(5000 + index),
        metadataTag=metadata_tag(f"pub-{index}"),
    )


def build_batch(
    batch_id: int, token: str, allocations: list[tuple[str, int]]
) -> tuple[str, list[dict[str, Any]]]:
    """
    Builds a merkle tree the way the operator does (odd nodes are paired with themselves)
    and returns the root with the proof file entries
    """
    bare = [
        ClaimEntry(batchId=batch_id, token=token, account=a, amount=amt, proof=())
        for a, amt in allocations
    ]
    layers = [[merkle.leaf(e) for e in bare]]
    while len(layers[-1]) > 1:
        prev = layers[-1]
        layers.append(
            [
                merkle.hash_pair(prev[i], prev[i + 1] if i + 1 < len(prev) else prev[i])
                for i in range(0, len(prev), 2)
            ]
        )

    def proof_for(idx: int) -> list[str]:
        proof = []
        for layer in layers[:-1]:
            pair = idx ^ 1
            sibling = layer[pair] if pair < len(layer) else layer[idx]
            proof.append("0x" + sibling.hex())
            idx //= 2
        return proof

    entries = [{**e.to_file_dict(), "proof": proof_for(i)} for i, e in enumerate(bare)]
    return "0x" + layers[-1][0].hex(), entries
