"""
Quark Command-Line Interface
============================

- **quarkc**: Quark to C compiler and native build driver

The tool is a Click application; see `quarkc --help`.
"""

__all__ = ["quarkc"]
