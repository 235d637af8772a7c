"""Integration module unit tests."""
