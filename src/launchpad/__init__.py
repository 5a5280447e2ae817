"""
Token launchpad: mint new SPL tokens and move balances from a connected wallet.
"""

__version__ = "0.1.0"
