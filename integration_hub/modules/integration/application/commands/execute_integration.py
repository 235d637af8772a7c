"""Execute integration command and handler.

Runs one execution through the execution service, then persists the
updated metrics with conflict retry, stores the execution record and
saves the API connections whose rate-limit state changed.
"""

from typing import Any
from uuid import UUID

from integration_hub.core.cqrs.base import Command, CommandResult
from integration_hub.core.errors import ValidationError
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.application.commands.base import (
    IntegrationCommandHandler,
)
from integration_hub.modules.integration.application.services import (
    ExecutionRecorder,
    IntegrationAccessService,
)
from integration_hub.modules.integration.domain.enums import ExecutionTrigger
from integration_hub.modules.integration.domain.errors import DataMappingNotFoundError
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IApiConnectionRepository,
    IDataMappingRepository,
)
from integration_hub.modules.integration.domain.services import (
    ExecutionContext,
    IntegrationExecutionService,
)

logger = get_logger(__name__)

EXECUTION_FAILED_CODE = "EXECUTION_FAILED"


class ExecuteIntegrationCommand(Command):
    """Command to execute an integration once."""

    def __init__(
        self,
        integration_id: UUID,
        user_id: UUID,
        trigger: ExecutionTrigger | str = ExecutionTrigger.MANUAL,
        request_data: Any = None,
        headers: dict[str, str] | None = None,
        mapping_id: UUID | None = None,
    ):
        """Initialize execute integration command.

        Args:
            integration_id: Integration to execute
            user_id: Caller
            trigger: What caused the execution
            request_data: Payload sent to endpoints whose method has a body
            headers: Extra request headers
            mapping_id: Optional data mapping applied to the response
        """
        super().__init__()

        self.integration_id = integration_id
        self.user_id = user_id
        self.trigger = ExecutionTrigger(trigger)
        self.request_data = request_data
        self.headers = dict(headers or {})
        self.mapping_id = mapping_id

        self._freeze()

    def _validate_command(self) -> None:
        if not self.integration_id:
            raise ValidationError("integration_id is required", field="integration_id")
        if not self.user_id:
            raise ValidationError("user_id is required", field="user_id")


class ExecuteIntegrationCommandHandler(IntegrationCommandHandler[ExecuteIntegrationCommand]):
    def __init__(
        self,
        access: IntegrationAccessService,
        execution_service: IntegrationExecutionService,
        recorder: ExecutionRecorder,
        connection_repository: IApiConnectionRepository,
        mapping_repository: IDataMappingRepository,
    ):
        self._access = access
        self._execution_service = execution_service
        self._recorder = recorder
        self._connection_repository = connection_repository
        self._mapping_repository = mapping_repository

    async def _handle(self, command: ExecuteIntegrationCommand) -> CommandResult:
        integration = await self._access.get_integration(
            command.integration_id, command.user_id
        )

        data_mapping = None
        if command.mapping_id is not None:
            data_mapping = await self._mapping_repository.get_by_id(command.mapping_id)
            if data_mapping is None or data_mapping.integration_id != integration.id:
                raise DataMappingNotFoundError(command.mapping_id)

        connections = await self._connection_repository.get_by_integration(integration.id)
        context = ExecutionContext(
            integration_id=integration.id,
            user_id=command.user_id,
            trigger=command.trigger,
            request_data=command.request_data,
            headers=command.headers,
        )
        result = await self._execution_service.execute_integration(
            integration, context, connections, data_mapping
        )

        for connection in connections:
            await self._connection_repository.save(connection)

        await self._recorder.record(
            integration,
            execution_id=result.execution_id,
            trigger=command.trigger,
            success=result.success,
            response_time=result.recorded_response_time,
            start_time=result.start_time,
            end_time=result.end_time,
            requests_count=result.requests_count,
            records_processed=result.metrics.records_processed,
            errors=[error.message for error in result.errors],
        )

        if not result.success:
            return CommandResult.failure_result(
                result.errors[0].message,
                EXECUTION_FAILED_CODE,
                warnings=result.warnings,
                data=result.to_dict(),
            )
        return CommandResult.success_result(result.to_dict(), warnings=result.warnings)

    @property
    def command_type(self) -> type[ExecuteIntegrationCommand]:
        return ExecuteIntegrationCommand
