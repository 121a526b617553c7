"""Utility helpers for the workspace organizer."""
