"""Parsing of FidoNet nodelists into node records, with a SQLite schema for storing them."""

__version__ = "0.1.0"