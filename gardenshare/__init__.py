"""GardenShare API - community garden land allocation backend."""

__version__ = "0.1.0"
