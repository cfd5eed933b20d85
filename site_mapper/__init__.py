# site_mapper/__init__.py
"""
SiteMapper package initializer.
Defines package version; the CLI lives in :mod:`site_mapper.cli`.
"""
__version__ = "0.1.0"
