"""Similarity search and text generation inference server."""

__version__ = "0.1.0"
