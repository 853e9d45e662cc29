"""Packaged taxonomy data."""
