"""Flvr CLI - a terminal companion for the Flavortown community platform."""

__version__ = "0.3.0"
