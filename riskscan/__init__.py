"""
riskscan - on-chain smart contract risk scanner.

Inspects a deployed token contract through read-only RPC calls, discovers
its trading venues and combines independent risk signals into one
explainable score.
"""

__version__ = "0.1.0"
