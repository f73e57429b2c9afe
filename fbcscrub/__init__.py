"""Frequency-based chunking of byte data: window analysis, chunk splitting and storage."""

__version__ = "0.1.0"