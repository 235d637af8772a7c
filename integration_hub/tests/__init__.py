"""Integration hub test suite."""
