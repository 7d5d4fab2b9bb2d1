"""Case Care service: clinical case intake with background AI insight generation."""

__version__ = "1.0.0"
