"""Importers package for the client import gate."""

from .client_csv import ClientCSVImporter, looks_like_header
