from claimer.contracts.common import (
    NonceAllocator,
    SequentialNonces,
    Transactor,
    check_connection,
    classify,
    connect,
    normalize_reason,
)
from claimer.contracts.distributor import Distributor, batch_id_bytes
from claimer.contracts.participants import ParticipantRegistry
