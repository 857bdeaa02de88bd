import asyncio
from typing import Optional

from claimer import proofs
from claimer.config import load_config, require
from claimer.contracts import Distributor, Transactor, check_connection, connect
from claimer.dispatcher import RemoteDistributor, submit_all
from claimer.models import BatchAttemptReport, NonceMode, RunConfig, Writer
from claimer.utils import run_name, stop_on_signals


async def claim_batch(
    config: RunConfig,
    batch: proofs.ProofSet,
    distributor: RemoteDistributor,
    stop: Optional[asyncio.Event] = None,
) -> BatchAttemptReport:
    """Claims a loaded batch and writes the report, plus a re-run file if anything is left"""
    report = await submit_all(
        batch,
        distributor,
        timeout=config.call_timeout,
        concurrency=config.concurrency,
        stop=stop,
    )

    writer = Writer(config.reports_dir, run_name("claims"))
    writer.write_report(report)
    if report.rerun_entries():
        path = writer.write_rerun(report)
        print(f"🔁 {len(report.rerun_entries())} entries can be re-run from {path}")

    print(report.summarize())
    return report


async def _run(config: RunConfig, batch: proofs.ProofSet) -> BatchAttemptReport:
    w3 = connect(config.rpc_url, config.call_timeout)
    await check_connection(w3, config.distributor_address)

    transactor = Transactor(
        w3,
        config.operator_private_key,
        explicit_nonces=config.nonce_mode == NonceMode.EXPLICIT,
    )
    distributor = Distributor(w3, config.distributor_address, transactor)
    print(f"Claiming from operator {transactor.address} ...")

    return await claim_batch(config, batch, distributor, stop_on_signals())


def run_claims(proofs_file: Optional[str] = None) -> BatchAttemptReport:
    """
    Claims every entry of the proof file against the configured distributor.
    The file is fully validated before the first remote call,
    a missing file means there is no new batch and nothing is sent.
    """

    # load and validate the configuration
    config = load_config(proofs_file=proofs_file)
    require(config, "rpc_url", "distributor_address", "operator_private_key")

    # read the batch, bad input stops the run here
    batch = proofs.load(config.proofs_file)
    if batch.absent:
        print(f"No proofs file found: {config.proofs_file}")
        return BatchAttemptReport(kind="claims", absent=True)
    print(f"Loaded {len(batch)} proofs.")

    return asyncio.run(_run(config, batch))
