"""Integration infrastructure layer tests."""
