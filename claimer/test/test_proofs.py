import pytest

from claimer import proofs
from claimer.errors import FormatError
from claimer.test.conftest import STUBS


def test_missing_file_is_an_absent_batch(tmp_path):
    batch = proofs.load(tmp_path / "nope.json")

    assert batch.absent
    assert len(batch) == 0
    assert list(batch) == []


def test_load_valid_file():
    batch = proofs.load(STUBS / "proofs_valid.json")

    assert not batch.absent
    assert len(batch) == 2

    # amounts may be strings or integers, addresses come back checksummed
    assert batch[0].amount == 1_000_000
    assert batch[1].amount == 2_500_000
    assert batch[0].account == "0x0000000000000000000000000000000000000001"
    assert len(batch[0].proof) == 2


def test_file_order_is_kept(write_proofs, batch):
    _, data = batch
    batch_file = proofs.load(write_proofs(data))

    assert [e.account.lower() for e in batch_file] == [d["account"].lower() for d in data]


@pytest.mark.parametrize(
    "stub, match",
    [
        ("proofs_missing_proof.json", "Malformed proof file"),
        ("proofs_duplicate.json", "Duplicate claim for batch 1"),
        ("proofs_not_a_list.json", "must contain a list"),
        ("proofs_truncated.json", "Cannot read proof file"),
    ],
)
def test_invalid_files_fail(stub, match):
    with pytest.raises(FormatError, match=match):
        proofs.load(STUBS / stub)


@pytest.mark.parametrize(
    "field, value",
    [
        ("amount", "-5"),
        ("amount", "1.5"),
        ("amount", "ten"),
        ("amount", "\u0661\u0662\u0663"),
        ("amount", True),
        ("account", "0x1234"),
        ("token", "not an address"),
        ("batchId", "seven"),
        ("proof", ["0x1234"]),
        ("proof", "0x" + "11" * 32),
    ],
)
def test_invalid_fields_fail(write_proofs, batch, field, value):
    _, data = batch
    data[2][field] = value

    with pytest.raises(FormatError):
        proofs.load(write_proofs(data))


def test_bytes32_batch_id_is_read_as_integer(write_proofs, batch):
    _, data = batch
    for d in data:
        d["batchId"] = "0x" + f"{7:064x}"

    assert all(e.batchId == 7 for e in proofs.load(write_proofs(data)))


def test_same_account_in_other_batch_is_not_a_duplicate(write_proofs, batch):
    _, data = batch
    other = {**data[0], "batchId": 8}

    assert len(proofs.load(write_proofs(data + [other]))) == len(data) + 1


def test_proofs_checked_against_known_roots(write_proofs, batch):
    root, data = batch
    path = write_proofs(data)

    assert len(proofs.load(path, roots={7: root})) == len(data)

    # roots for other batches are irrelevant
    assert len(proofs.load(path, roots={8: "0x" + "00" * 32})) == len(data)


def test_tampered_amount_fails_verification(write_proofs, batch):
    root, data = batch
    data[3]["amount"] = str(int(data[3]["amount"]) + 1)

    with pytest.raises(FormatError, match="Entry 3 .* does not verify"):
        proofs.load(write_proofs(data), roots={7: root})
