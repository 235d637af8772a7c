"""Integration application services."""

from .execution_recorder import ExecutionRecorder
from .integration_access import IntegrationAccessService

__all__ = ["ExecutionRecorder", "IntegrationAccessService"]
