"""
Chain scenarios for end-to-end scans.
"""

import pytest

from riskscan.config import ConfigManager
from riskscan.scanner import RiskScanner

TOKEN = "0x1111111111111111111111111111111111111111"
OWNER = "0x2222222222222222222222222222222222222222"
PAIR = "0x3333333333333333333333333333333333333333"
DEPLOYER = "0x7777777777777777777777777777777777777777"

UNISWAP_V2 = "0x5C69bEe701ef814a2B6a3EDD4B1652CB9cc5aA6f"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
DEAD = "0x000000000000000000000000000000000000dEaD"
ZERO = "0x0000000000000000000000000000000000000000"


def register_token(chain, owner=ZERO):
    chain.set_code(TOKEN)
    chain.on_call(TOKEN, "name()", ["string"], ["Test Token"])
    chain.on_call(TOKEN, "symbol()", ["string"], ["TT"])
    chain.on_call(TOKEN, "decimals()", ["uint8"], [18])
    chain.on_call(TOKEN, "totalSupply()", ["uint256"], [10**27])
    chain.on_call(TOKEN, "owner()", ["address"], [owner])


def register_balance(chain, holder, amount):
    chain.on_call(TOKEN, "balanceOf(address)", ["uint256"], [amount], ["address"], [holder.lower()])


@pytest.fixture
def healthy_token(fake_chain):
    """
    Renounced token with a burned-LP USDC pair worth $60k and a small
    deployer balance.
    """
    register_token(fake_chain)
    fake_chain.on_call(TOKEN, "deployer()", ["address"], [DEPLOYER])
    register_balance(fake_chain, DEPLOYER, 10**24)
    register_balance(fake_chain, PAIR, 10**26)

    fake_chain.on_call(UNISWAP_V2, "getPair(address,address)", ["address"], [PAIR],
                       ["address", "address"], [TOKEN.lower(), USDC.lower()])
    fake_chain.on_call(PAIR, "token0()", ["address"], [TOKEN])
    fake_chain.on_call(PAIR, "getReserves()", ["uint112", "uint112", "uint32"], [10**24, 30_000 * 10**6, 0])
    fake_chain.on_call(PAIR, "totalSupply()", ["uint256"], [1_000])
    fake_chain.on_call(PAIR, "balanceOf(address)", ["uint256"], [950], ["address"], [DEAD.lower()])
    return TOKEN


@pytest.fixture
def critical_token(fake_chain):
    """EOA-owned token that can mint and change fees."""
    register_token(fake_chain, owner=OWNER)
    fake_chain.add_function(TOKEN, "mint(address,uint256)")
    fake_chain.add_function(TOKEN, "setFee(uint256)")
    return TOKEN


@pytest.fixture
def scanner(fake_client_factory):
    scanner = RiskScanner("ethereum", config=ConfigManager(), client_factory=fake_client_factory)
    scanner.deadline = None
    return scanner
