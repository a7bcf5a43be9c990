"""
Typed contract reads and selector probing over the endpoint pool.

ContractReader turns raw pool results into decoded values. Malformed or
missing data becomes ``None`` (or an inconclusive ProbeResult) rather than
an exception, so analyzers can degrade their confidence instead of failing.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector
from web3 import Web3

from .pool import EndpointPool, RpcCallResult, RpcMethod

logger = logging.getLogger(__name__)

PUSH1 = 0x60
PUSH4 = 0x63
PUSH32 = 0x7F


def selector(signature: str) -> bytes:
    """4-byte function selector for a canonical signature, e.g. ``owner()``."""
    return function_signature_to_4byte_selector(signature)


def bytecode_has_selector(code: bytes, function_selector: bytes) -> bool:
    """
    Check whether a selector appears as a PUSH4 operand in deployed bytecode.

    Walks the instruction stream so that PUSH data is never mistaken for
    opcodes.
    """
    i = 0
    length = len(code)
    while i < length:
        op = code[i]
        if op == PUSH4 and code[i + 1:i + 5] == function_selector:
            return True
        if PUSH1 <= op <= PUSH32:
            i += op - PUSH1 + 1
        i += 1
    return False


@dataclass
class ProbeResult:
    """
    Result of probing a contract for an optional capability.

    Attributes:
        exists: Capability detected
        raw_result: Raw return data when a call answered
        conclusive: False when no definite answer was obtained (transport
            failure, or only an empty fallback answer)
    """

    exists: bool
    raw_result: Optional[bytes] = None
    conclusive: bool = True


class ContractReader:
    """Decoded reads against contracts through an EndpointPool."""

    def __init__(self, pool: EndpointPool):
        self.pool = pool
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def get_code(self, address: str) -> Optional[bytes]:
        """
        Fetch deployed bytecode.

        Returns:
            Bytecode (empty for accounts without code), or None when every
            endpoint failed
        """
        result = await self.pool.call(
            RpcMethod.GET_CODE,
            (Web3.to_checksum_address(address),),
            cache_key=f"code:{address.lower()}",
        )
        if not result.success or result.data is None:
            return None
        return bytes(result.data)

    async def is_contract(self, address: str) -> Optional[bool]:
        """True for contracts, False for EOAs, None when unknown."""
        code = await self.get_code(address)
        if code is None:
            return None
        return len(code) > 0

    async def call_raw(self, address: str, data: bytes) -> RpcCallResult:
        """Execute an ``eth_call`` with raw calldata; results are cached."""
        tx = {"to": Web3.to_checksum_address(address), "data": "0x" + data.hex()}
        return await self.pool.call(
            RpcMethod.CALL,
            (tx,),
            cache_key=f"call:{address.lower()}:{data.hex()}",
        )

    async def probe(self, address: str, function_selector: bytes) -> ProbeResult:
        """
        Detect whether a contract implements a function.

        The bytecode is checked first; when the selector is not found as a
        PUSH4 operand the selector is called bare. A revert is conclusive
        absence and returned data counts as presence. An empty success is
        what a catch-all fallback gives for any selector, so it stays
        inconclusive.
        """
        code = await self.get_code(address)
        if code and bytecode_has_selector(code, function_selector):
            return ProbeResult(exists=True)

        result = await self.call_raw(address, function_selector)
        if not result.success:
            return ProbeResult(exists=False, conclusive=False)
        if result.reverted:
            return ProbeResult(exists=False)
        raw = bytes(result.data or b"")
        if not raw:
            return ProbeResult(exists=False, raw_result=raw, conclusive=False)
        return ProbeResult(exists=True, raw_result=raw)

    async def read(
        self,
        address: str,
        signature: str,
        output_types: Sequence[str],
        arg_types: Sequence[str] = (),
        args: Sequence[Any] = (),
    ) -> Optional[tuple]:
        """
        Call a view function and ABI-decode its return data.

        Args:
            address: Contract address
            signature: Canonical signature, e.g. ``balanceOf(address)``
            output_types: ABI types of the return values
            arg_types: ABI types of the arguments
            args: Argument values

        Returns:
            Decoded tuple, or None on failure, revert or malformed data
        """
        calldata = selector(signature) + (encode(list(arg_types), list(args)) if arg_types else b"")
        result = await self.call_raw(address, calldata)
        if not result.success or result.reverted or not result.data:
            return None
        try:
            return decode(list(output_types), bytes(result.data))
        except Exception as e:
            self.logger.debug(f"Could not decode {signature} from {address}: {e}")
            return None

    async def read_uint(self, address: str, signature: str,
                        arg_types: Sequence[str] = (), args: Sequence[Any] = ()) -> Optional[int]:
        decoded = await self.read(address, signature, ["uint256"], arg_types, args)
        return decoded[0] if decoded else None

    async def read_address(self, address: str, signature: str,
                           arg_types: Sequence[str] = (), args: Sequence[Any] = ()) -> Optional[str]:
        decoded = await self.read(address, signature, ["address"], arg_types, args)
        return Web3.to_checksum_address(decoded[0]) if decoded else None

    async def read_string(self, address: str, signature: str) -> Optional[str]:
        """Read an ABI string, falling back to a NUL-padded bytes32."""
        result = await self.call_raw(address, selector(signature))
        if not result.success or result.reverted or not result.data:
            return None
        data = bytes(result.data)
        try:
            return decode(["string"], data)[0]
        except Exception:
            if len(data) != 32:
                return None
        # bytes32 tokens such as MKR
        return data.rstrip(b"\x00").decode("utf-8", errors="ignore") or None

    async def balance_of(self, token: str, holder: str) -> Optional[int]:
        return await self.read_uint(token, "balanceOf(address)", ["address"], [Web3.to_checksum_address(holder)])

    async def get_storage_at(self, address: str, slot: int) -> Optional[bytes]:
        result = await self.pool.call(
            RpcMethod.GET_STORAGE_AT,
            (Web3.to_checksum_address(address), slot),
            cache_key=f"storage:{address.lower()}:{slot:#x}",
        )
        if not result.success or result.data is None:
            return None
        return bytes(result.data)

    async def get_block_number(self) -> Optional[int]:
        result = await self.pool.call(RpcMethod.BLOCK_NUMBER)
        return int(result.data) if result.success and result.data is not None else None

    async def get_logs(self, filter_params: Dict[str, Any]) -> Optional[List[Any]]:
        """Fetch logs; None when every endpoint failed."""
        result = await self.pool.call(RpcMethod.GET_LOGS, (filter_params,))
        if not result.success:
            return None
        return list(result.data or [])
