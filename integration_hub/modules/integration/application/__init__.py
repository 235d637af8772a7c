"""Integration application layer: commands, queries, DTOs and services."""
