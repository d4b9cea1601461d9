"""Utility helpers: translation, normalization and masking."""
