"""
Genesis client: wallet session and contract gateway for the Genesis crowdfunding dApp.

Connects to a wallet provider, reads and writes projects on the Genesis
contract, and normalizes ledger records (18-decimal fixed point amounts,
second-based timestamps) into application values held in a process-wide
session store.
"""

__version__ = "0.1.0"
