import asyncio
from typing import Iterable, Optional, Protocol, Union

from claimer.errors import RemoteRejection, TransportFailure
from claimer.models import AttemptRecord, BatchAttemptReport, ClaimEntry, Outcome
from claimer.workqueue import run_bounded

Result = Union[str, RemoteRejection, TransportFailure]


class RemoteDistributor(Protocol):
    """The on-chain distributor, or anything that claims like one"""

    async def claim(self, entry: ClaimEntry) -> str:
        """
        Submits the claim and waits for confirmation, returning the transaction hash.
        Raises `RemoteRejection` or `TransportFailure`
        """
        ...


async def claim_one(
    distributor: RemoteDistributor, entry: ClaimEntry, timeout: float
) -> Result:
    """Runs a single claim, returning the tx hash or the classified failure"""
    try:
        return await asyncio.wait_for(distributor.claim(entry), timeout)
    except asyncio.TimeoutError:
        return TransportFailure("timeout", f"claim did not confirm within {timeout}s")
    except (RemoteRejection, TransportFailure) as e:
        return e
    except Exception as e:
        # recorded against the entry, a re-run picks it up again
        return TransportFailure("error", f"{type(e).__name__}: {e}")


def to_record(idx: int, entry: ClaimEntry, result: Result) -> AttemptRecord:
    record = AttemptRecord(
        index=idx,
        key=str(entry.batchId),
        account=entry.account,
        amount=str(entry.amount),
        outcome=Outcome.SUCCEEDED,
        payload=entry.to_file_dict(),
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


async def submit_all(
    entries: Iterable[ClaimEntry],
    distributor: RemoteDistributor,
    timeout: float = 120,
    concurrency: int = 1,
    stop: Optional[asyncio.Event] = None,
) -> BatchAttemptReport:
    """
    Claims every entry once, in order. One failed entry never aborts the batch:
    rejections and transport failures are recorded and the run moves on.
    Nothing is retried here, re-running the whole batch is safe because
    the distributor refuses to pay the same claim twice.

    A `concurrency` above 1 is only safe when nonces are allocated explicitly.
    """
    entries = list(entries)
    report = BatchAttemptReport(kind="claims")

    async def work(idx: int, entry: ClaimEntry) -> Result:
        return await claim_one(distributor, entry, timeout)

    def on_result(idx: int, entry: ClaimEntry, result: Result) -> None:
        record = to_record(idx, entry, result)
        report.record(record)
        if record.outcome == Outcome.SUCCEEDED:
            print(f"claimed: {entry.account} {entry.amount}")
        else:
            print(f"claim failed: {entry.account} {record.reason}")

    skipped = await run_bounded(entries, work, on_result, concurrency, stop)

    for idx in skipped:
        entry = entries[idx]
        report.record(
            AttemptRecord(
                index=idx,
                key=str(entry.batchId),
                account=entry.account,
                amount=str(entry.amount),
                outcome=Outcome.NOT_ATTEMPTED,
                reason="stopped",
                payload=entry.to_file_dict(),
            )
        )
    report.cancelled = len(skipped) > 0
    return report
