"""Utility helpers for Flvr CLI."""
