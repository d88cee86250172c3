"""
SIC/XE SDK Command-Line Interface
================================

This package provides the command-line tools for the SIC/XE SDK:

- **sicasm**: SIC/XE assembler

The tool is implemented as a Click-based CLI application with
help and error reporting.
"""

__all__ = ["sicasm"]
