"""Techelons — registration backend for the technical society's fest and workshop."""

__version__ = "1.0.0"
