import asyncio
from dataclasses import dataclass
from typing import Protocol

from claimer.errors import TransportFailure
from claimer.models import ParticipantRecord


class RemoteRegistry(Protocol):
    """The on-chain participant registry"""

    async def register(self, record: ParticipantRecord) -> str:
        """
        Registers the participant and waits for confirmation, returning the transaction hash.
        Raises `RemoteRejection` (eg: `already-registered`) or `TransportFailure`
        """
        ...


@dataclass
class ParticipantRegistryClient:
    """
    Thin wrapper around the remote registry: one state changing call per registration,
    bounded by `timeout`. Whether an already registered identity is fine is left to the caller,
    it surfaces as a `RemoteRejection` with reason `already-registered`.
    """

    remote: RemoteRegistry
    timeout: float = 120

    async def register(self, record: ParticipantRecord) -> str:
        try:
            return await asyncio.wait_for(self.remote.register(record), self.timeout)
        except asyncio.TimeoutError as e:
            raise TransportFailure(
                "timeout", f"registration did not confirm within {self.timeout}s"
            ) from e
