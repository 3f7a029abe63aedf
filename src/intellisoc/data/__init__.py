"""Data layer - record schemas."""
