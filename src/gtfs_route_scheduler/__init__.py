"""GTFS route scheduler - times animated route instances for a transit map."""

__version__ = "0.1.0"
