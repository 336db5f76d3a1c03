"""Thinking Patterns MCP - sequential thinking with reasoning tool recommendations."""

__version__ = "1.0.0"
