"""
Test data builders for integration hub tests.

Fluent builders for the aggregates the tests exercise, plus a scripted
HTTP transport standing in for real endpoints.
"""

from .integration_builder import IntegrationBuilder
from .mapping_builder import DataMappingBuilder, order_mapping, order_schemas
from .transport import ScriptedTransport

__all__ = [
    "DataMappingBuilder",
    "IntegrationBuilder",
    "ScriptedTransport",
    "order_mapping",
    "order_schemas",
]
