"""Canonical data models."""
