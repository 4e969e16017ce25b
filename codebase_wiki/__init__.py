"""Diagram-rich documentation and security insights for source code repositories."""

__version__ = "0.1.0"
