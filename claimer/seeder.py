import asyncio
from typing import Callable, Optional, Sequence, Union

from eth_account import Account

from claimer.errors import RemoteRejection, TransportFailure
from claimer.models import (
    AttemptRecord,
    BatchAttemptReport,
    Outcome,
    ParticipantRecord,
    SeedJournal,
    metadata_tag,
)
from claimer.workqueue import run_bounded
from claimer.registry import ParticipantRegistryClient

# (index, role mask) -> a fresh participant
IdentityGenerator = Callable[[int, int], ParticipantRecord]
# (registrations done, total)
Progress = Callable[[int, int], None]

Result = Union[str, RemoteRejection, TransportFailure]


def random_publisher(index: int, role_mask: int) -> ParticipantRecord:
    """A brand new random wallet that is paid out to itself, tagged by its index"""
    wallet = Account.create()
    return ParticipantRecord(
        identity=wallet.address,
        roleMask=role_mask,
        payoutAddress=wallet.address,
        metadataTag=metadata_tag(f"pub-{index}"),
    )


def print_progress(done: int, total: int) -> None:
    print(f"  registered {done}/{total}")


async def register_one(
    client: ParticipantRegistryClient, record: ParticipantRecord
) -> Result:
    try:
        return await client.register(record)
    except (RemoteRejection, TransportFailure) as e:
        return e
    except Exception as e:
        # recorded against the identity, `reseed` picks it up again
        return TransportFailure("error", f"{type(e).__name__}: {e}")


def to_record(idx: int, participant: ParticipantRecord, result: Result) -> AttemptRecord:
    record = AttemptRecord(
        index=idx,
        key=participant.metadataTag,
        account=participant.identity,
        outcome=Outcome.SUCCEEDED,
        payload=participant.model_dump(),
    )
    if isinstance(result, RemoteRejection):
        record.outcome = Outcome.REJECTED
        record.reason = result.reason
    elif isinstance(result, TransportFailure):
        record.outcome = Outcome.TRANSPORT_FAILURE
        record.reason = result.reason
    else:
        record.tx_hash = result
    return record


async def register_all(
    participants: Sequence[tuple[int, ParticipantRecord]],
    client: ParticipantRegistryClient,
    journal: Optional[SeedJournal] = None,
    progress: Optional[Progress] = print_progress,
    progress_every: int = 20,
    concurrency: int = 1,
    stop: Optional[asyncio.Event] = None,
) -> BatchAttemptReport:
    """
    Registers `participants` in order. A failed registration is logged and the run continues.
    Progress is reported after every `progress_every` registrations, whatever their outcome.
    """
    report = BatchAttemptReport(kind="registrations")
    total = len(participants)
    done = 0

    async def work(pos: int, item: tuple[int, ParticipantRecord]) -> Result:
        return await register_one(client, item[1])

    def on_result(pos: int, item: tuple[int, ParticipantRecord], result: Result) -> None:
        nonlocal done
        idx, participant = item
        record = to_record(idx, participant, result)
        report.record(record)
        if journal is not None:
            journal.mark(participant.identity, record.outcome, record.reason)
        if record.outcome != Outcome.SUCCEEDED:
            print(f"registration failed: {participant.identity} {record.reason}")

        done += 1
        if progress is not None and done % progress_every == 0:
            try:
                progress(done, total)
            except Exception as e:
                print(f"progress reporting failed: {e}")

    skipped = await run_bounded(participants, work, on_result, concurrency, stop)

    for pos in skipped:
        idx, participant = participants[pos]
        report.record(
            AttemptRecord(
                index=idx,
                key=participant.metadataTag,
                account=participant.identity,
                outcome=Outcome.NOT_ATTEMPTED,
                reason="stopped",
                payload=participant.model_dump(),
            )
        )
    report.cancelled = len(skipped) > 0
    return report


async def seed(
    count: int,
    identity_generator: IdentityGenerator,
    role_mask: int,
    client: ParticipantRegistryClient,
    journal: Optional[SeedJournal] = None,
    **kwargs,
) -> BatchAttemptReport:
    """
    Generates `count` fresh identities and registers them one after the other.
    With a journal, every identity is written down before it is registered
    so the missing ones can be re-seeded later with `reseed`.
    """
    start = journal.next_index() if journal is not None else 0
    participants = []
    for idx in range(start, start + count):
        participant = identity_generator(idx, role_mask)
        if journal is not None:
            journal.add_identity(idx, participant)
        participants.append((idx, participant))

    print(f"Seeding {count} participants ...")
    report = await register_all(participants, client, journal, **kwargs)
    print("Done seeding.")
    return report


async def reseed(
    journal: SeedJournal, client: ParticipantRegistryClient, **kwargs
) -> BatchAttemptReport:
    """Registers again every journaled identity that is not confirmed in the registry"""
    pending = journal.pending()
    print(f"Re-seeding {len(pending)} participants ...")
    return await register_all(pending, client, journal, **kwargs)
