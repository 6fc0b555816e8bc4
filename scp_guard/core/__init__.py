"""
Core modules for SCP Guard.

This package contains the threshold classification, report parsing,
policy synthesis and pipeline orchestration logic.
"""
