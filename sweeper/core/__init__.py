"""Sweep engine: chains, tokens, accounts and the sweep state machine."""
