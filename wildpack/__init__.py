"""Wildpack progress and rewards engine."""
