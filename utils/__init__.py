"""Shared helpers: joint angles and frame overlays."""
