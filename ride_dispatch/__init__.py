"""Ride dispatch simulator for the driver app."""

__version__ = "1.0.0"
