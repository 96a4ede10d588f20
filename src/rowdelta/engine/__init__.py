"""Delta and state assertion engine.

This package computes multiset differences between observations and
verifies them against expectations, producing structured diagnostics.
"""
