"""Shared domain exceptions and pure formulas used across feature modules."""
