"""Sweep token balances from Nexus smart accounts into the connected wallet."""

__version__ = "0.1.0"
