import asyncio
from typing import Optional

from claimer.config import load_config, require
from claimer.contracts import ParticipantRegistry, Transactor, check_connection, connect
from claimer.models import BatchAttemptReport, NonceMode, RunConfig, SeedJournal, Writer
from claimer.registry import ParticipantRegistryClient
from claimer.seeder import random_publisher, reseed, seed
from claimer.utils import run_name, stop_on_signals


def journal_path(config: RunConfig) -> str:
    return f"{config.reports_dir}/seed-journal.json"


async def _client(config: RunConfig) -> ParticipantRegistryClient:
    w3 = connect(config.rpc_url, config.call_timeout)
    await check_connection(w3, config.registry_address)

    transactor = Transactor(
        w3,
        config.operator_private_key,
        explicit_nonces=config.nonce_mode == NonceMode.EXPLICIT,
    )
    print(f"Registering from operator {transactor.address} ...")
    registry = ParticipantRegistry(w3, config.registry_address, transactor)
    return ParticipantRegistryClient(registry, timeout=config.call_timeout)


def _finish(config: RunConfig, report: BatchAttemptReport) -> BatchAttemptReport:
    Writer(config.reports_dir, run_name("seed")).write_report(report)
    print(report.summarize())
    return report


async def _seed(config: RunConfig) -> BatchAttemptReport:
    client = await _client(config)
    journal = SeedJournal(journal_path(config))
    report = await seed(
        config.seed_count,
        random_publisher,
        config.role_mask,
        client,
        journal,
        progress_every=config.progress_every,
        concurrency=config.concurrency,
        stop=stop_on_signals(),
    )
    return _finish(config, report)


async def _reseed(config: RunConfig) -> BatchAttemptReport:
    client = await _client(config)
    journal = SeedJournal(journal_path(config))
    report = await reseed(
        journal,
        client,
        progress_every=config.progress_every,
        concurrency=config.concurrency,
        stop=stop_on_signals(),
    )
    return _finish(config, report)


def _config(count: Optional[int] = None) -> RunConfig:
    config = load_config(seed_count=count)
    require(config, "rpc_url", "registry_address", "operator_private_key")
    return config


def run_seed(count: Optional[int] = None) -> BatchAttemptReport:
    """Generates and registers `count` (default `SEED_COUNT`) fresh publishers"""
    return asyncio.run(_seed(_config(count)))


def run_reseed() -> BatchAttemptReport:
    """Registers again the journaled identities that never made it into the registry"""
    return asyncio.run(_reseed(_config()))
