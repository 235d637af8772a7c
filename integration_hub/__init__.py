"""Integration hub: integration data-mapping and execution engine."""

__version__ = "0.1.0"
