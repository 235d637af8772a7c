"""Integration application layer tests."""
