"""Traveler directory."""
