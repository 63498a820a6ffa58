"""Persistence layer for subway lines, stations and the links between them."""

__version__ = "0.1.0"
