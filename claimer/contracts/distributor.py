from web3 import AsyncWeb3

from claimer.contracts.abi import DISTRIBUTOR_ABI
from claimer.contracts.common import Transactor
from claimer.merkle import to_bytes32
from claimer.models import ClaimEntry, EthereumAddress


def batch_id_bytes(batch_id: int) -> bytes:
    """Batch ids are integers off-chain and bytes32 on-chain"""
    return batch_id.to_bytes(32, "big")


class Distributor:
    """Claims entries on the deployed distributor on behalf of their accounts"""

    def __init__(self, w3: AsyncWeb3, address: EthereumAddress, transactor: Transactor):
        self.address = address
        self.contract = w3.eth.contract(address=address, abi=DISTRIBUTOR_ABI)
        self.transactor = transactor

    async def claim(self, entry: ClaimEntry) -> str:
        fn = self.contract.functions.claim(
            batch_id_bytes(entry.batchId),
            entry.token,
            entry.account,
            entry.amount,
            [to_bytes32(node) for node in entry.proof],
        )
        return await self.transactor.send(fn)
