from web3 import AsyncWeb3

from claimer.contracts.abi import PARTICIPANT_REGISTRY_ABI
from claimer.contracts.common import Transactor
from claimer.merkle import to_bytes32
from claimer.models import EthereumAddress, ParticipantRecord


class ParticipantRegistry:
    """Registers participants on the deployed registry from the operator account"""

    def __init__(self, w3: AsyncWeb3, address: EthereumAddress, transactor: Transactor):
        self.address = address
        self.contract = w3.eth.contract(address=address, abi=PARTICIPANT_REGISTRY_ABI)
        self.transactor = transactor

    async def register(self, record: ParticipantRecord) -> str:
        fn = self.contract.functions.register(
            record.identity,
            record.roleMask,
            record.payoutAddress,
            to_bytes32(record.metadataTag),
        )
        return await self.transactor.send(fn)
