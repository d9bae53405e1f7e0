"""
Test suite for quant-engine

Contains:
- tests/unit/          : Unit tests for individual modules
"""
