"""
SCP Guard.

Derives service control policies from scanner API usage reports.
"""

__version__ = "0.1.0"
