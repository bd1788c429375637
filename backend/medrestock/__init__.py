"""Medication restocking workflow for the provider app."""

__version__ = "0.1.0"
