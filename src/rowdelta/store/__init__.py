"""Snapshot storage layer.

This module keeps the per-session baseline data sets used by
delta assertions.
"""
