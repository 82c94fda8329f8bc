"""Reproducible dependency lock files for Maven builds."""

__version__ = "0.1.0"
