import asyncio
import heapq
from typing import Optional, Union

import aiohttp
import eth_utils as eth
from eth_account import Account
from web3 import AsyncWeb3
from web3.exceptions import TimeExhausted, Web3Exception

from claimer.errors import FatalInfrastructureError, RemoteRejection, TransportFailure
from claimer.models import EthereumAddress

# substrings of revert messages -> normalized rejection reason, first match wins
REVERT_REASONS = [
    ("already claimed", "already-claimed"),
    ("already registered", "already-registered"),
    ("invalid proof", "invalid-proof"),
    ("insufficient", "insufficient-funds"),
    ("exceeds balance", "insufficient-funds"),
    ("missing role", "unauthorized"),
    ("not authorized", "unauthorized"),
    ("unauthorized", "unauthorized"),
]

# substrings of node errors about the operator's transaction -> transport reason
SUBMISSION_REASONS = [
    ("nonce too low", "nonce"),
    ("already known", "nonce"),
    ("underpriced", "underpriced"),
    ("insufficient funds for gas", "operator-gas"),
]

# submission reasons meaning the nonce is taken by another transaction
STALE_NONCE_REASONS = ("nonce", "underpriced")

TRANSPORT_ERRORS = (
    asyncio.TimeoutError,
    TimeExhausted,
    aiohttp.ClientError,
    ConnectionError,
    OSError,
)


def normalize_reason(message: str) -> str:
    """Maps a revert message such as `execution reverted: Dist: already claimed` to a reason"""
    lowered = message.lower()
    for needle, reason in REVERT_REASONS:
        if needle in lowered:
            return reason
    return "reverted"


def submission_reason(message: str) -> Optional[str]:
    """The reason when the node refused the operator's transaction rather than the entry"""
    lowered = message.lower()
    for needle, reason in SUBMISSION_REASONS:
        if needle in lowered:
            return reason
    return None


def classify(
    exc: Exception, broadcast: bool = False
) -> Union[RemoteRejection, TransportFailure]:
    """
    Turns a web3 or network exception into a rejection or a transport failure.
    Only reverts are rejections, node errors about a `broadcast` are transport failures
    """
    if isinstance(exc, (asyncio.TimeoutError, TimeExhausted)):
        return TransportFailure("timeout", str(exc))
    if isinstance(exc, Web3Exception):
        message = getattr(exc, "message", None) or str(exc)
        reason = submission_reason(message)
        if reason is not None:
            return TransportFailure(reason, message)
        if broadcast:
            return TransportFailure("submission", message)
        return RemoteRejection(normalize_reason(message), message)
    return TransportFailure("network", f"{type(exc).__name__}: {exc}")


def connect(rpc_url: str, timeout: float) -> AsyncWeb3:
    return AsyncWeb3(
        AsyncWeb3.AsyncHTTPProvider(
            rpc_url, request_kwargs={"timeout": aiohttp.ClientTimeout(total=timeout)}
        )
    )


async def check_connection(w3: AsyncWeb3, address: EthereumAddress) -> None:
    """Fails the whole run up front if the node or the contract cannot be reached"""
    try:
        connected = await w3.is_connected()
        code = await w3.eth.get_code(address) if connected else b""
    except TRANSPORT_ERRORS as e:
        raise FatalInfrastructureError(f"Cannot reach the RPC endpoint: {e}") from e

    if not connected:
        raise FatalInfrastructureError("Cannot reach the RPC endpoint")
    if len(code) == 0:
        raise FatalInfrastructureError(f"No contract deployed at {address}")


class SequentialNonces:
    """Lets the node pick the next pending nonce. Only safe with one submission in flight"""

    def __init__(self, w3: AsyncWeb3, address: EthereumAddress):
        self.w3 = w3
        self.address = address

    async def next(self) -> int:
        return await self.w3.eth.get_transaction_count(self.address, "pending")

    def settle(self, nonce: int) -> None:
        pass

    def release(self, nonce: int, reusable: bool = True) -> None:
        pass


class NonceAllocator:
    """
    Hands out strictly increasing nonces for one submitting account,
    so that several submissions can be in flight without replacing each other.

    The pending count is read once. A nonce that was never broadcast is `release`d
    and handed out again before any new one. A nonce the node no longer accepts marks
    the allocator stale, the pending count is read again once nothing is outstanding.
    """

    def __init__(self, w3: AsyncWeb3, address: EthereumAddress):
        self.w3 = w3
        self.address = address
        self._next: Optional[int] = None
        self._free: list[int] = []
        self._outstanding: set[int] = set()
        self._stale = False
        self._lock = asyncio.Lock()

    async def next(self) -> int:
        async with self._lock:
            if self._stale and not self._outstanding:
                self._next = None
                self._free.clear()
                self._stale = False

            if self._free:
                nonce = heapq.heappop(self._free)
            else:
                if self._next is None:
                    self._next = await self.w3.eth.get_transaction_count(
                        self.address, "pending"
                    )
                nonce = self._next
                self._next += 1
            self._outstanding.add(nonce)
            return nonce

    def settle(self, nonce: int) -> None:
        """`nonce` was broadcast"""
        self._outstanding.discard(nonce)

    def release(self, nonce: int, reusable: bool = True) -> None:
        """`nonce` was not broadcast, or may have been when not `reusable`"""
        self._outstanding.discard(nonce)
        if reusable:
            heapq.heappush(self._free, nonce)
        else:
            self._stale = True


Nonces = Union[SequentialNonces, NonceAllocator]


def operator_account(private_key: str):
    try:
        return Account.from_key(private_key)
    except (ValueError, TypeError) as e:
        raise FatalInfrastructureError("Invalid operator private key") from e


class Transactor:
    """Signs contract calls with the operator key, sends them and waits for the receipt"""

    def __init__(self, w3: AsyncWeb3, private_key: str, explicit_nonces: bool = False):
        self.w3 = w3
        self.account = operator_account(private_key)
        nonces = NonceAllocator if explicit_nonces else SequentialNonces
        self.nonces: Nonces = nonces(w3, self.account.address)

    @property
    def address(self) -> EthereumAddress:
        return self.account.address

    async def send(self, fn) -> str:
        """
        Simulates `fn` first so reverts surface as rejections without spending gas,
        then broadcasts it and waits for it to be mined
        """
        try:
            gas = await fn.estimate_gas({"from": self.address})
        except (Web3Exception, *TRANSPORT_ERRORS) as e:
            raise classify(e) from e

        try:
            nonce = await self.nonces.next()
        except (Web3Exception, *TRANSPORT_ERRORS) as e:
            raise classify(e, broadcast=True) from e

        try:
            tx = await fn.build_transaction(
                {"from": self.address, "nonce": nonce, "gas": gas}
            )
            signed = self.account.sign_transaction(tx)
        except (Web3Exception, *TRANSPORT_ERRORS) as e:
            self.nonces.release(nonce)
            raise classify(e, broadcast=True) from e
        except (Exception, asyncio.CancelledError):
            self.nonces.release(nonce)
            raise

        try:
            tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except Web3Exception as e:
            # refused by the node, the nonce is free unless another transaction holds it
            failure = classify(e, broadcast=True)
            reusable = failure.reason not in STALE_NONCE_REASONS
            self.nonces.release(nonce, reusable=reusable)
            raise failure from e
        except (Exception, asyncio.CancelledError) as e:
            # the transaction may have reached the node
            self.nonces.release(nonce, reusable=False)
            if isinstance(e, TRANSPORT_ERRORS):
                raise classify(e) from e
            raise
        self.nonces.settle(nonce)

        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(tx_hash)
        except TRANSPORT_ERRORS as e:
            raise classify(e) from e

        if receipt["status"] == 0:
            raise RemoteRejection("reverted", f"transaction {eth.to_hex(tx_hash)} reverted")
        return eth.to_hex(tx_hash)
