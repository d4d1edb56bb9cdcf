"""Normative scoring engine for standardized neuropsychological tests."""

__version__ = "1.0.0"
