"""Bundled game content: sample catalog and mission definitions."""
