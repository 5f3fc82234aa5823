"""Stratibreak: project gap analysis and severity scoring."""

__version__ = "0.1.0"
