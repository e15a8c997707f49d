"""Event check-in and meal redemption engine."""

__version__ = "1.0.0"
