"""
Test Paper Generator.

Client and relay for an exam-question generation API: validate a PDF and a query,
deliver them through an ordered list of candidate endpoints, and render the returned
paper for display or download.
"""

from .config.loader import load_config

__all__ = ["load_config"]
