"""Core utilities shared by every feature package."""
