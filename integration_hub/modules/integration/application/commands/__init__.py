"""Integration command handlers.

Write side of the module. Every handler answers with a ``CommandResult``
envelope and never raises.
"""

from .base import IntegrationCommandHandler
from .change_integration_status import (
    ActivateIntegrationCommand,
    ActivateIntegrationCommandHandler,
    DeactivateIntegrationCommand,
    DeactivateIntegrationCommandHandler,
)
from .clone_integration import CloneIntegrationCommand, CloneIntegrationCommandHandler
from .create_integration import CreateIntegrationCommand, CreateIntegrationCommandHandler
from .create_mapping import CreateDataMappingCommand, CreateDataMappingCommandHandler
from .create_sync_job import CreateSyncJobCommand, CreateSyncJobCommandHandler
from .delete_integration import DeleteIntegrationCommand, DeleteIntegrationCommandHandler
from .delete_mapping import DeleteDataMappingCommand, DeleteDataMappingCommandHandler
from .delete_sync_job import DeleteSyncJobCommand, DeleteSyncJobCommandHandler
from .execute_integration import (
    ExecuteIntegrationCommand,
    ExecuteIntegrationCommandHandler,
)
from .execute_sync_job import ExecuteSyncJobCommand, ExecuteSyncJobCommandHandler
from .refresh_credentials import (
    RefreshCredentialsCommand,
    RefreshCredentialsCommandHandler,
)
from .test_integration import TestIntegrationCommand, TestIntegrationCommandHandler
from .update_integration import UpdateIntegrationCommand, UpdateIntegrationCommandHandler
from .update_mapping import UpdateDataMappingCommand, UpdateDataMappingCommandHandler
from .update_sync_job import UpdateSyncJobCommand, UpdateSyncJobCommandHandler

__all__ = [
    # Integration lifecycle
    "ActivateIntegrationCommand",
    "ActivateIntegrationCommandHandler",
    "CloneIntegrationCommand",
    "CloneIntegrationCommandHandler",
    "CreateIntegrationCommand",
    "CreateIntegrationCommandHandler",
    "DeactivateIntegrationCommand",
    "DeactivateIntegrationCommandHandler",
    "DeleteIntegrationCommand",
    "DeleteIntegrationCommandHandler",
    "UpdateIntegrationCommand",
    "UpdateIntegrationCommandHandler",
    # Execution
    "ExecuteIntegrationCommand",
    "ExecuteIntegrationCommandHandler",
    "RefreshCredentialsCommand",
    "RefreshCredentialsCommandHandler",
    "TestIntegrationCommand",
    "TestIntegrationCommandHandler",
    # Data mappings
    "CreateDataMappingCommand",
    "CreateDataMappingCommandHandler",
    "DeleteDataMappingCommand",
    "DeleteDataMappingCommandHandler",
    "UpdateDataMappingCommand",
    "UpdateDataMappingCommandHandler",
    # Sync jobs
    "CreateSyncJobCommand",
    "CreateSyncJobCommandHandler",
    "DeleteSyncJobCommand",
    "DeleteSyncJobCommandHandler",
    "ExecuteSyncJobCommand",
    "ExecuteSyncJobCommandHandler",
    "UpdateSyncJobCommand",
    "UpdateSyncJobCommandHandler",
    # Base
    "IntegrationCommandHandler",
]
