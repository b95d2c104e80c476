"""Storefront - product catalogue management."""

__version__ = "0.1.0"
