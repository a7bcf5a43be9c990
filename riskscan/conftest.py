"""
Shared fixtures: an in-memory chain that answers the subset of the async
web3 ``eth`` API used by the endpoint pool.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence

import pytest
from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector
from hexbytes import HexBytes
from web3.exceptions import ContractLogicError

from riskscan.config import ConfigManager
from riskscan.config.chains import Endpoint
from riskscan.rpc.pool import EndpointPool
from riskscan.rpc.reader import ContractReader

# Minimal runtime bytecode (PUSH1 0x80 PUSH1 0x40 MSTORE)
DEFAULT_CODE = bytes.fromhex("6080604052")


def _hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value).lower()


def topic_for_address(address: str) -> str:
    return "0x" + "0" * 24 + address.lower()[2:]


class FakeChain:
    """Programmable chain state shared by every fake client."""

    def __init__(self):
        self.codes: Dict[str, bytes] = {}
        self.storage: Dict[tuple, bytes] = {}
        self.exact_calls: Dict[tuple, Any] = {}
        self.selector_calls: Dict[tuple, Any] = {}
        self.logs: List[Dict[str, Any]] = []
        self.block_number = 22_000_000
        self.max_log_span: Optional[int] = None
        self.log_spans: List[int] = []
        self.disconnects = 0
        self.call_log: List[tuple] = []
        self.failing_addresses: set = set()
        self.fallback_addresses: set = set()

    def set_code(self, address: str, code: bytes = DEFAULT_CODE):
        self.codes[address.lower()] = code

    def add_function(self, address: str, signature: str):
        """Append the selector as a PUSH4 operand, as a compiled dispatcher would hold it."""
        code = self.codes.get(address.lower(), DEFAULT_CODE)
        self.codes[address.lower()] = code + b"\x63" + function_signature_to_4byte_selector(signature)

    def set_storage(self, address: str, slot: int, value: bytes):
        self.storage[(address.lower(), slot)] = value.rjust(32, b"\x00")

    def on_call(
        self,
        address: str,
        signature: str,
        output_types: Sequence[str] = (),
        values: Sequence[Any] = (),
        arg_types: Sequence[str] = (),
        args: Optional[Sequence[Any]] = None,
        raw: Optional[bytes] = None,
    ):
        """Register a return value; with ``args`` the full calldata must match."""
        sel = function_signature_to_4byte_selector(signature)
        payload = raw if raw is not None else encode(list(output_types), list(values))
        if args is not None:
            calldata = sel + encode(list(arg_types), list(args))
            self.exact_calls[(address.lower(), calldata)] = payload
        else:
            self.selector_calls[(address.lower(), sel)] = payload

    def on_call_error(self, address: str, signature: str, error: Exception):
        sel = function_signature_to_4byte_selector(signature)
        self.selector_calls[(address.lower(), sel)] = error

    def fail_address(self, address: str):
        """Every call to this address raises a transport error."""
        self.failing_addresses.add(address.lower())

    def set_fallback(self, address: str):
        """Unregistered selectors succeed with empty return data instead of reverting."""
        self.fallback_addresses.add(address.lower())

    def add_log(self, address: str, topics: Sequence[str], data: bytes = b"", block_number: Optional[int] = None):
        self.logs.append({
            "address": address,
            "topics": [HexBytes(t) for t in topics],
            "data": HexBytes(data),
            "blockNumber": self.block_number if block_number is None else block_number,
        })

    def answer_call(self, to: str, data: bytes) -> bytes:
        to = to.lower()
        self.call_log.append((to, data))
        if to in self.failing_addresses:
            raise ConnectionError(f"connection reset by {to}")
        if (to, data) in self.exact_calls:
            response = self.exact_calls[(to, data)]
        elif (to, data[:4]) in self.selector_calls:
            response = self.selector_calls[(to, data[:4])]
        elif to in self.fallback_addresses:
            response = b""
        else:
            raise ContractLogicError("execution reverted")
        if isinstance(response, Exception):
            raise response
        return response

    def match_logs(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        from_block = params.get("fromBlock", 0)
        to_block = params.get("toBlock", self.block_number)
        if to_block == "latest":
            to_block = self.block_number
        span = to_block - from_block + 1
        self.log_spans.append(span)
        if self.max_log_span is not None and span > self.max_log_span:
            raise ValueError(f"block range too large: {span} > {self.max_log_span}")

        address = str(params.get("address", "")).lower()
        wanted = params.get("topics", [])
        matches = []
        for log in self.logs:
            if not from_block <= log["blockNumber"] <= to_block:
                continue
            if address and log["address"].lower() != address:
                continue
            topics = [_hex(t) for t in log["topics"]]
            ok = True
            for position, topic in enumerate(wanted):
                if topic is None:
                    continue
                if position >= len(topics) or topics[position] != _hex(topic):
                    ok = False
                    break
            if ok:
                matches.append(log)
        return matches


class FakeEth:
    def __init__(self, chain: FakeChain):
        self.chain = chain

    async def get_code(self, address):
        if address.lower() in self.chain.failing_addresses:
            raise ConnectionError("connection refused")
        return HexBytes(self.chain.codes.get(address.lower(), b""))

    async def call(self, tx):
        data = bytes.fromhex(tx["data"][2:])
        return HexBytes(self.chain.answer_call(tx["to"], data))

    async def get_storage_at(self, address, slot):
        return HexBytes(self.chain.storage.get((address.lower(), slot), b"\x00" * 32))

    async def _block_number(self):
        return self.chain.block_number

    @property
    def block_number(self):
        return self._block_number()

    async def get_logs(self, params):
        return self.chain.match_logs(params)


class FakeProvider:
    def __init__(self, chain: FakeChain):
        self.chain = chain

    async def disconnect(self):
        self.chain.disconnects += 1


class FakeClient:
    def __init__(self, chain: FakeChain):
        self.eth = FakeEth(chain)
        self.provider = FakeProvider(chain)


@pytest.fixture
def fake_chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def test_endpoints() -> List[Endpoint]:
    return [
        Endpoint("https://primary.example", 1, 1.0, "primary"),
        Endpoint("https://secondary.example", 2, 1.0, "secondary"),
    ]


@pytest.fixture
def pool(fake_chain, test_endpoints) -> EndpointPool:
    return EndpointPool(test_endpoints, client_factory=lambda endpoint: FakeClient(fake_chain))


@pytest.fixture
def reader(pool) -> ContractReader:
    return ContractReader(pool)


@pytest.fixture(scope="session")
def ethereum_settings():
    return ConfigManager().get_chain_settings("ethereum")


@pytest.fixture
def fake_client_factory(fake_chain) -> Callable[[Endpoint], FakeClient]:
    return lambda endpoint: FakeClient(fake_chain)


@pytest.fixture
def address_topic() -> Callable[[str], str]:
    return topic_for_address
