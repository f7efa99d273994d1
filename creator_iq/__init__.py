"""Tiered cognitive-score estimation for Farcaster accounts."""

__version__ = "0.1.0"
