"""Conditional simplification refactoring commands."""
