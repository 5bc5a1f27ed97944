"""Utility helpers for FocusKeeper."""
