"""Integration infrastructure: in-memory persistence, HTTP clients and wiring."""
