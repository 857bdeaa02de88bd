import asyncio
import json
import os

import pytest

from claimer import cli, proofs
from claimer.errors import FatalInfrastructureError, FormatError
from claimer.models import RunConfig
from claimer.run_claims import claim_batch, run_claims
from claimer.test.conftest import STUBS
from claimer.test.fakes import FakeDistributor


@pytest.fixture
def live_env(monkeypatch, tmp_path):
    monkeypatch.setenv("RPC_URL", "http://127.0.0.1:8545")
    monkeypatch.setenv("DISTRIBUTOR_ADDRESS", "0x" + "ab" * 20)
    monkeypatch.setenv("OPERATOR_PRIVATE_KEY", "0x" + "11" * 32)
    monkeypatch.setenv("REPORTS_DIR", str(tmp_path / "reports"))


@pytest.fixture
def no_remote(monkeypatch):
    def connect(*_):
        raise AssertionError("the remote must not be contacted")

    monkeypatch.setattr("claimer.run_claims.connect", connect)


def test_claim_batch_writes_report_and_rerun(tmp_path, write_proofs, batch, entries):
    config = RunConfig(reports_dir=str(tmp_path / "reports"))
    distributor = FakeDistributor(unreachable=(entries[1].account,))
    batch_file = proofs.load(write_proofs(batch[1]))

    report = asyncio.run(claim_batch(config, batch_file, distributor))

    assert report.succeeded == len(entries) - 1
    [run_dir] = os.listdir(config.reports_dir)
    assert run_dir.startswith("claims-")
    with open(f"{config.reports_dir}/{run_dir}/rerun-proofs.json") as f:
        rerun = json.load(f)

    # the re-run file is itself a valid proof file holding only the failed entry
    again = proofs.load(f"{config.reports_dir}/{run_dir}/rerun-proofs.json")
    assert [e.account for e in again] == [entries[1].account]
    assert rerun[0]["amount"] == str(entries[1].amount)


def test_absent_proofs_do_nothing(live_env, no_remote, tmp_path):
    report = run_claims(str(tmp_path / "missing.json"))

    assert report.absent
    assert report.attempted == 0


def test_malformed_proofs_stop_before_any_call(live_env, no_remote):
    with pytest.raises(FormatError):
        run_claims(str(STUBS / "proofs_duplicate.json"))


def test_cli_exit_codes(monkeypatch, live_env, no_remote, tmp_path):
    with pytest.raises(SystemExit) as e:
        cli.claim(str(tmp_path / "missing.json"))
    assert e.value.code == 0

    with pytest.raises(SystemExit) as e:
        cli.claim(str(STUBS / "proofs_missing_proof.json"))
    assert e.value.code == 1


def test_cli_unreachable_remote_is_fatal(monkeypatch):
    def unreachable(count=None):
        raise FatalInfrastructureError("Cannot reach the RPC endpoint")

    monkeypatch.setattr("claimer.cli.run_seed", unreachable)

    with pytest.raises(SystemExit) as e:
        cli.seed(10)
    assert e.value.code == 1


def test_cli_missing_configuration_is_fatal(tmp_path):
    with pytest.raises(SystemExit) as e:
        cli.claim(str(tmp_path / "missing.json"))
    assert e.value.code == 1


def test_cli_wrongly_typed_configuration_is_fatal(
    monkeypatch, live_env, no_remote, tmp_path
):
    monkeypatch.setenv("CALL_TIMEOUT", "abc")

    with pytest.raises(SystemExit) as e:
        cli.claim(str(tmp_path / "missing.json"))
    assert e.value.code == 1
