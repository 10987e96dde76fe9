"""Helm release orchestration for CI deployment events."""

__version__ = "1.0.0"
