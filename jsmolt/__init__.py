"""jsmolt - JavaScript and TypeScript refactoring CLI tool."""

__version__ = "0.1.0"
