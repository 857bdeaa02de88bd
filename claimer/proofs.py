import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional, Union

from pydantic import TypeAdapter, ValidationError

from claimer import merkle
from claimer.errors import FormatError
from claimer.models import Bytes32, ClaimEntry

ClaimEntries = TypeAdapter(list[ClaimEntry])


@dataclass
class ProofSet:
    """
    The claim entries of one batch file, in file order.
    :param `absent`: the source did not exist, which means there is no new batch yet
    """

    source: str
    entries: list[ClaimEntry] = field(default_factory=list)
    absent: bool = False

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ClaimEntry]:
        return iter(self.entries)

    def __getitem__(self, idx: int) -> ClaimEntry:
        return self.entries[idx]


def ensure_unique(entries: list[ClaimEntry]) -> None:
    """Two entries for the same (batchId, account, token) means the proof set is corrupt"""
    seen = set()
    for entry in entries:
        if entry.key in seen:
            raise FormatError(
                f"Duplicate claim for batch {entry.batchId}, account {entry.account}, token {entry.token}"
            )
        seen.add(entry.key)


def ensure_verified(entries: list[ClaimEntry], roots: dict[int, Bytes32]) -> None:
    """Checks each proof against the root committed for its batch, where one is known"""
    for idx, entry in enumerate(entries):
        root = roots.get(entry.batchId)
        if root is not None and not merkle.verify(entry, root):
            raise FormatError(
                f"Entry {idx} ({entry.account}) does not verify against the root of batch {entry.batchId}"
            )


def load(
    source: Union[str, Path], roots: Optional[dict[int, Bytes32]] = None
) -> ProofSet:
    """
    Reads and validates a batch proof file. No network access.
    A missing file is an empty, `absent` batch rather than an error.
    Anything unparseable, duplicated or failing verification raises `FormatError`
    so that a corrupt batch is never partially processed.
    """
    path = Path(source)
    if not path.exists():
        return ProofSet(source=str(source), absent=True)

    try:
        data = json.loads(path.read_text())
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise FormatError(f"Cannot read proof file {source}: {e}") from e

    if not isinstance(data, list):
        raise FormatError(f"Proof file {source} must contain a list of claims")

    try:
        entries = ClaimEntries.validate_python(data)
    except ValidationError as e:
        raise FormatError(f"Malformed proof file {source}: {e}") from e

    ensure_unique(entries)
    if roots:
        ensure_verified(entries, roots)

    return ProofSet(source=str(source), entries=entries)
