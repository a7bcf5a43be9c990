"""
Tests for the identity, ownership, dangerous-function and logic analyzers.
"""

import pytest
from eth_utils import function_signature_to_4byte_selector

from riskscan.analyzers import (
    IMPLEMENTATION_SLOT,
    DangerousFunctions,
    FunctionAnalyzer,
    IdentityAnalyzer,
    OwnershipAnalyzer,
    OwnershipInfo,
    OwnerType,
    combine_logic_risk,
)
from riskscan.types import Confidence, RiskLevel

TOKEN = "0x1111111111111111111111111111111111111111"
OWNER = "0x2222222222222222222222222222222222222222"
MULTISIG = "0x5555555555555555555555555555555555555555"
IMPLEMENTATION = "0x6666666666666666666666666666666666666666"
ZERO = "0x0000000000000000000000000000000000000000"


@pytest.fixture
def identity(reader, ethereum_settings):
    return IdentityAnalyzer(reader, ethereum_settings)


@pytest.fixture
def ownership(reader, ethereum_settings):
    return OwnershipAnalyzer(reader, ethereum_settings)


@pytest.fixture
def functions(reader, ethereum_settings):
    return FunctionAnalyzer(reader, ethereum_settings)


class TestIdentity:
    """Test IdentityAnalyzer."""

    @pytest.mark.asyncio
    async def test_no_code(self, identity):
        result = await identity.analyze(TOKEN)

        assert result.has_code is False
        assert result.confidence is Confidence.VERIFIED
        assert "No contract code found at this address" in result.findings
        assert result.evidence == [f"Evidence: https://etherscan.io/address/{TOKEN}"]

    @pytest.mark.asyncio
    async def test_code_unavailable(self, identity, fake_chain):
        fake_chain.fail_address(TOKEN)

        result = await identity.analyze(TOKEN)

        assert result.has_code is False
        assert result.confidence is Confidence.UNVERIFIABLE

    @pytest.mark.asyncio
    async def test_standard_token(self, identity, fake_chain):
        fake_chain.set_code(TOKEN)
        fake_chain.on_call(TOKEN, "name()", ["string"], ["Test Token"])
        fake_chain.on_call(TOKEN, "symbol()", ["string"], ["TT"])
        fake_chain.on_call(TOKEN, "decimals()", ["uint8"], [18])
        fake_chain.on_call(TOKEN, "totalSupply()", ["uint256"], [10**27])

        result = await identity.analyze(TOKEN)

        assert result.has_code is True
        assert (result.name, result.symbol, result.decimals) == ("Test Token", "TT", 18)
        assert result.total_supply == 10**27
        assert result.is_standard is True
        assert result.confidence is Confidence.VERIFIED
        assert result.risk is RiskLevel.LOW

    @pytest.mark.asyncio
    async def test_bytes32_symbol_and_bad_decimals(self, identity, fake_chain):
        fake_chain.set_code(TOKEN)
        fake_chain.on_call(TOKEN, "symbol()", raw=b"MKR".ljust(32, b"\x00"))
        fake_chain.on_call(TOKEN, "decimals()", ["uint256"], [300])

        result = await identity.analyze(TOKEN)

        assert result.symbol == "MKR"
        assert result.name is None
        assert result.decimals is None
        assert "Decimals: Assumed 18" in result.findings
        assert result.confidence is Confidence.PARTIAL


class TestOwnership:
    """Test OwnershipAnalyzer."""

    @pytest.mark.asyncio
    async def test_eoa_owner(self, ownership, fake_chain):
        fake_chain.on_call(TOKEN, "owner()", ["address"], [OWNER])

        result = await ownership.analyze(TOKEN)

        assert result.owner_address == OWNER
        assert result.owner_type is OwnerType.EOA
        assert result.is_proxy is False
        assert "No proxy pattern detected" in result.findings
        assert result.confidence is Confidence.VERIFIED

    @pytest.mark.asyncio
    async def test_contract_owner(self, ownership, fake_chain):
        fake_chain.on_call(TOKEN, "owner()", ["address"], [MULTISIG])
        fake_chain.set_code(MULTISIG)

        result = await ownership.analyze(TOKEN)

        assert result.owner_type is OwnerType.CONTRACT
        assert result.risk is RiskLevel.LOW

    @pytest.mark.asyncio
    async def test_renounced(self, ownership, fake_chain):
        fake_chain.on_call(TOKEN, "owner()", ["address"], [ZERO])

        result = await ownership.analyze(TOKEN)

        assert result.owner_type is OwnerType.ZERO_ADDRESS
        assert result.ownership_renounced is True

    @pytest.mark.asyncio
    async def test_get_owner_fallback(self, ownership, fake_chain):
        fake_chain.on_call(TOKEN, "getOwner()", ["address"], [OWNER])

        result = await ownership.analyze(TOKEN)

        assert result.owner_address == OWNER

    @pytest.mark.asyncio
    async def test_proxy_with_eoa_owner(self, ownership, fake_chain):
        fake_chain.set_storage(TOKEN, IMPLEMENTATION_SLOT, bytes.fromhex(IMPLEMENTATION[2:]))
        fake_chain.on_call(TOKEN, "owner()", ["address"], [OWNER])

        result = await ownership.analyze(TOKEN)

        assert result.is_proxy is True
        assert result.implementation_address == IMPLEMENTATION
        assert result.risk is RiskLevel.HIGH

    @pytest.mark.asyncio
    async def test_no_owner_function(self, ownership):
        result = await ownership.analyze(TOKEN)

        assert result.owner_type is OwnerType.NOT_FOUND
        assert result.risk is RiskLevel.UNKNOWN
        assert "Ownership: Not detected (no owner() function)" in result.findings

    @pytest.mark.asyncio
    async def test_owner_call_failure_is_inconclusive(self, ownership, fake_chain):
        fake_chain.fail_address(TOKEN)

        result = await ownership.analyze(TOKEN)

        assert result.owner_type is OwnerType.NOT_FOUND
        assert result.confidence is Confidence.PARTIAL
        assert "Evidence unavailable: owner() call failed" in result.evidence


class TestDangerousFunctions:
    """Test FunctionAnalyzer."""

    @pytest.mark.asyncio
    async def test_nothing_detected(self, functions, fake_chain):
        fake_chain.set_code(TOKEN)

        result = await functions.analyze(TOKEN)

        assert result.probes_total == 6
        assert result.probes_inconclusive == 0
        assert not any(result.detected.values())
        assert result.risk is RiskLevel.LOW
        assert result.confidence is Confidence.VERIFIED

    @pytest.mark.asyncio
    async def test_catch_all_fallback_detects_nothing(self, functions, fake_chain):
        fake_chain.set_code(TOKEN)
        fake_chain.set_fallback(TOKEN)

        result = await functions.analyze(TOKEN)

        assert not any(result.detected.values())
        assert result.probes_inconclusive == result.probes_total
        assert result.risk is RiskLevel.UNKNOWN
        assert result.confidence is Confidence.UNVERIFIABLE

    @pytest.mark.asyncio
    async def test_detected_by_call(self, functions, fake_chain):
        fake_chain.set_code(TOKEN)
        fake_chain.on_call(TOKEN, "mint(uint256)", ["bool"], [True])
        fake_chain.on_call(TOKEN, "addToBlacklist(address)", ["bool"], [True])

        result = await functions.analyze(TOKEN)

        assert result.detected["mint"] == ["mint(uint256)"]
        assert result.detected["blacklist"] == ["addToBlacklist(address)"]
        assert "Mint function detected" in result.findings
        assert "Blacklist function detected" in result.findings
        assert result.risk is RiskLevel.MEDIUM

    @pytest.mark.asyncio
    async def test_detected_in_bytecode(self, functions, fake_chain):
        code = b"\x60\x80" + b"\x63" + function_signature_to_4byte_selector("pause()") + b"\x14"
        fake_chain.set_code(TOKEN, code)

        result = await functions.analyze(TOKEN)

        assert result.has_pause is True
        assert f"pause(): https://etherscan.io/address/{TOKEN}#writeContract" in result.evidence

    @pytest.mark.asyncio
    async def test_proxy_scans_implementation(self, functions, fake_chain):
        fake_chain.set_storage(TOKEN, IMPLEMENTATION_SLOT, bytes.fromhex(IMPLEMENTATION[2:]))
        fake_chain.set_code(IMPLEMENTATION)
        fake_chain.add_function(IMPLEMENTATION, "setFee(uint256)")

        result = await functions.analyze(TOKEN)

        assert result.target == IMPLEMENTATION
        assert result.has_set_fee is True

    @pytest.mark.asyncio
    async def test_all_probes_failing(self, functions, fake_chain):
        fake_chain.fail_address(TOKEN)

        result = await functions.analyze(TOKEN)

        assert result.all_inconclusive is True
        assert result.risk is RiskLevel.UNKNOWN
        assert result.confidence is Confidence.UNVERIFIABLE


def make_functions(confidence=Confidence.VERIFIED, inconclusive=0, **detected):
    return DangerousFunctions(
        detected={k: v for k, v in detected.items()},
        probes_total=6,
        probes_inconclusive=inconclusive,
        confidence=confidence,
    )


def make_ownership(owner_type, is_proxy=False, confidence=Confidence.VERIFIED):
    return OwnershipInfo(owner_type=owner_type, is_proxy=is_proxy, confidence=confidence)


class TestLogicCombination:
    """Test combine_logic_risk rule order."""

    def test_mint_and_fee_with_eoa_is_critical(self):
        result = combine_logic_risk(
            make_ownership(OwnerType.EOA),
            make_functions(mint=["mint(address,uint256)"], set_fee=["setFee(uint256)"]),
        )

        assert result.risk is RiskLevel.CRITICAL
        assert result.confidence is Confidence.VERIFIED
        assert result.should_abort is True

    def test_critical_with_partial_evidence_does_not_abort(self):
        result = combine_logic_risk(
            make_ownership(OwnerType.EOA, confidence=Confidence.PARTIAL),
            make_functions(mint=["mint(uint256)"], set_fee=["setFee(uint256)"]),
        )

        assert result.risk is RiskLevel.CRITICAL
        assert result.should_abort is False

    def test_blacklist_with_eoa_is_high(self):
        result = combine_logic_risk(make_ownership(OwnerType.EOA), make_functions(blacklist=["blacklist(address)"]))

        assert result.risk is RiskLevel.HIGH

    def test_proxy_with_eoa_is_high(self):
        result = combine_logic_risk(make_ownership(OwnerType.EOA, is_proxy=True), make_functions())

        assert result.risk is RiskLevel.HIGH

    def test_dangerous_function_with_contract_owner_is_medium(self):
        result = combine_logic_risk(make_ownership(OwnerType.CONTRACT), make_functions(pause=["pause()"]))

        assert result.risk is RiskLevel.MEDIUM

    def test_renounced_is_low(self):
        result = combine_logic_risk(make_ownership(OwnerType.ZERO_ADDRESS), make_functions())

        assert result.risk is RiskLevel.LOW

    def test_owner_not_found_is_unknown(self):
        result = combine_logic_risk(make_ownership(OwnerType.NOT_FOUND), make_functions())

        assert result.risk is RiskLevel.UNKNOWN
        assert result.confidence is Confidence.UNVERIFIABLE

    def test_all_probes_inconclusive_is_unknown_even_when_renounced(self):
        result = combine_logic_risk(
            make_ownership(OwnerType.ZERO_ADDRESS),
            make_functions(confidence=Confidence.UNVERIFIABLE, inconclusive=6),
        )

        assert result.risk is RiskLevel.UNKNOWN

    def test_findings_are_combined(self):
        ownership = make_ownership(OwnerType.EOA)
        ownership.findings.append("Owner: 0x22222222... (EOA)")
        functions = make_functions(mint=["mint(uint256)"])
        functions.findings.append("Mint function detected")

        result = combine_logic_risk(ownership, functions)

        assert result.findings == ["Owner: 0x22222222... (EOA)", "Mint function detected"]
