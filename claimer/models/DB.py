from typing import Optional

from tinydb import TinyDB, where

from claimer.models.Participant import ParticipantRecord
from claimer.models.Report import ALREADY_DONE_REASONS, Outcome


class SeedJournal(TinyDB):
    """
    Keeps every generated identity alongside the outcome of its last registration,
    so a later run can re-seed only the identities that are missing from the registry.
    Identities are written before they are registered and are never removed.
    """

    def __init__(self, path: str, drop=False, **kwargs):
        super().__init__(path, indent=4, create_dirs=True, **kwargs)

        if drop:
            self.drop_tables()

    @property
    def identities(self):
        return self.table("identities")

    def add_identity(self, index: int, record: ParticipantRecord) -> None:
        self.identities.insert(
            {"index": index, **record.model_dump(), "outcome": None, "reason": None}
        )

    def mark(self, identity: str, outcome: Outcome, reason: Optional[str] = None) -> None:
        self.identities.update(
            {"outcome": outcome.value, "reason": reason}, where("identity") == identity
        )

    def next_index(self) -> int:
        return max([doc["index"] for doc in self.identities.all()], default=-1) + 1

    @staticmethod
    def _registered(doc) -> bool:
        if doc["outcome"] == Outcome.SUCCEEDED.value:
            return True
        return doc["outcome"] == Outcome.REJECTED.value and (
            doc["reason"] in ALREADY_DONE_REASONS
        )

    def pending(self) -> list[tuple[int, ParticipantRecord]]:
        """Identities never confirmed in the registry, in the order they were generated"""
        docs = sorted(self.identities.all(), key=lambda d: d["index"])
        return [
            (
                doc["index"],
                ParticipantRecord(
                    identity=doc["identity"],
                    roleMask=doc["roleMask"],
                    payoutAddress=doc["payoutAddress"],
                    metadataTag=doc["metadataTag"],
                ),
            )
            for doc in docs
            if not self._registered(doc)
        ]
