"""Tulip Trader: a simulation of the 1637 Dutch tulip bubble."""

__version__ = "0.1.0"
