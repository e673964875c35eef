"""Delegates deep codebase analysis to an external agentic CLI and salvages its verdict."""

__version__ = "0.1.0"
