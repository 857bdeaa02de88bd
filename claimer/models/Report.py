from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from claimer.models.types import BigNumber, EthereumAddress

ALREADY_DONE_REASONS = ("already-claimed", "already-registered")


class Outcome(str, Enum):
    """
    :state SUCCEEDED: the remote call was confirmed
    :state REJECTED: the remote service refused the entry, not worth retrying as is
    :state TRANSPORT_FAILURE: the call did not complete, eligible for a re-run
    :state NOT_ATTEMPTED: the run was stopped before the entry was dispatched
    """

    SUCCEEDED = "succeeded"
    REJECTED = "rejected"
    TRANSPORT_FAILURE = "transport_failure"
    NOT_ATTEMPTED = "not_attempted"


class AttemptRecord(BaseModel):
    """
    Result of one claim or registration
    :param `index`: position of the entry in the run input, used to keep reports ordered
    :param `key`: batch id for claims, metadata tag for registrations
    :param `payload`: the input entry in file format, so failures can be re-run
    """

    index: int
    key: str
    account: EthereumAddress
    amount: Optional[BigNumber] = None
    outcome: Outcome
    reason: Optional[str] = None
    tx_hash: Optional[str] = None
    payload: dict[str, Any] = Field(default_factory=dict, exclude=True)


class BatchAttemptReport(BaseModel):
    """
    Process local aggregation of one run. Only ever appended to.
    :param `absent`: no proof source was found, the run had nothing to do
    :param `cancelled`: the run was stopped early, undispatched entries are `NOT_ATTEMPTED`
    """

    kind: Literal["claims", "registrations"]
    records: list[AttemptRecord] = []
    absent: bool = False
    cancelled: bool = False

    def record(self, record: AttemptRecord) -> None:
        self.records.append(record)

    def ordered(self) -> list[AttemptRecord]:
        return sorted(self.records, key=lambda r: r.index)

    def _count(self, outcome: Outcome) -> int:
        return len([r for r in self.records if r.outcome == outcome])

    @property
    def attempted(self) -> int:
        return len(self.records) - self.not_attempted

    @property
    def succeeded(self) -> int:
        return self._count(Outcome.SUCCEEDED)

    @property
    def rejected(self) -> int:
        return self._count(Outcome.REJECTED)

    @property
    def transport_failures(self) -> int:
        return self._count(Outcome.TRANSPORT_FAILURE)

    @property
    def not_attempted(self) -> int:
        return self._count(Outcome.NOT_ATTEMPTED)

    @property
    def failed(self) -> int:
        return self.rejected + self.transport_failures

    @property
    def already_done(self) -> int:
        """Rejections that mean the effect was applied by an earlier run"""
        return len(
            [
                r
                for r in self.records
                if r.outcome == Outcome.REJECTED and r.reason in ALREADY_DONE_REASONS
            ]
        )

    def failures(self) -> list[AttemptRecord]:
        return [
            r
            for r in self.ordered()
            if r.outcome in (Outcome.REJECTED, Outcome.TRANSPORT_FAILURE)
        ]

    def rerun_entries(self) -> list[dict[str, Any]]:
        """
        Entries worth dispatching again: transport failures and entries never attempted.
        Remote rejections (eg: already claimed) are left out.
        """
        return [
            r.payload
            for r in self.ordered()
            if r.outcome in (Outcome.TRANSPORT_FAILURE, Outcome.NOT_ATTEMPTED)
        ]

    def totals(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "rejected": self.rejected,
            "already_done": self.already_done,
            "transport_failures": self.transport_failures,
            "not_attempted": self.not_attempted,
            "cancelled": self.cancelled,
        }

    def summarize(self) -> str:
        """Human readable summary, one line per failure"""
        if self.absent:
            return "Nothing to do: no batch found"
        lines = [
            f"{self.kind}: {self.attempted} attempted, {self.succeeded} succeeded, "
            f"{self.rejected} rejected ({self.already_done} already done), "
            f"{self.transport_failures} transport failures"
        ]
        if self.cancelled:
            lines.append(f"stopped early, {self.not_attempted} not attempted")
        for r in self.failures():
            lines.append(f"  [{r.outcome.value}] {r.key} {r.account}: {r.reason}")
        return "\n".join(lines)
