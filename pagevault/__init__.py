"""Fetch web pages, extract their main text, and encrypt it at rest."""

__version__ = "0.1.0"
