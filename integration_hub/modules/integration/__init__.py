"""Integration module: external system connections, data mapping and execution.

This module provides:
- Integration lifecycle and health tracking
- Declarative field mappings with transformation and validation
- Scheduled synchronization jobs with bounded retry
- Execution of integrations against external HTTP APIs
"""

__all__: list[str] = []
