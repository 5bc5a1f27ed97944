"""Service layer for FocusKeeper."""
