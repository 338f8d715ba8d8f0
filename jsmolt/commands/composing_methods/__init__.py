"""Inlining and other composing-methods refactoring commands."""
