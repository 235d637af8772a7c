"""Integration domain layer tests."""
