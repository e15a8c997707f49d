"""Core configuration, constants and helpers."""
