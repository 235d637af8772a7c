"""Execute sync job command and handler.

A run marks the job running and persists that first, so a concurrent
run of the same job fails its version check. The integration is then
executed with the job's data mapping under the job's timeout and the
outcome completes the job or fails it, scheduling a retry when one is
left.
"""

import asyncio
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from integration_hub.core.cqrs.base import Command, CommandResult
from integration_hub.core.errors import ValidationError
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.application.commands.base import (
    IntegrationCommandHandler,
    save_and_publish,
)
from integration_hub.modules.integration.application.services import (
    ExecutionRecorder,
    IntegrationAccessService,
)
from integration_hub.modules.integration.domain.enums import ExecutionTrigger
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IApiConnectionRepository,
    IDataMappingRepository,
    ISyncJobRepository,
)
from integration_hub.modules.integration.domain.interfaces.services import (
    IEventPublisher,
)
from integration_hub.modules.integration.domain.services import (
    ExecutionContext,
    IntegrationExecutionService,
)
from integration_hub.modules.integration.domain.services.integration_execution import (
    generate_execution_id,
)
from integration_hub.modules.integration.domain.value_objects import SyncResult

logger = get_logger(__name__)

SYNC_FAILED_CODE = "SYNC_FAILED"


class ExecuteSyncJobCommand(Command):
    """Command to run a sync job now."""

    def __init__(
        self,
        sync_job_id: UUID,
        user_id: UUID,
        records: Any = None,
        trigger: ExecutionTrigger | str = ExecutionTrigger.MANUAL,
    ):
        """Initialize execute sync job command.

        Args:
            sync_job_id: Job to run
            user_id: Caller
            records: Payload for the run, sent to endpoints whose method has a body
            trigger: ``scheduled`` keeps the retry count of a pending retry;
                any other trigger starts a fresh run
        """
        super().__init__()
        self.sync_job_id = sync_job_id
        self.user_id = user_id
        self.records = records
        self.trigger = ExecutionTrigger(trigger)
        self._freeze()

    def _validate_command(self) -> None:
        if not self.sync_job_id:
            raise ValidationError("sync_job_id is required", field="sync_job_id")


class ExecuteSyncJobCommandHandler(IntegrationCommandHandler[ExecuteSyncJobCommand]):
    def __init__(
        self,
        access: IntegrationAccessService,
        execution_service: IntegrationExecutionService,
        recorder: ExecutionRecorder,
        sync_job_repository: ISyncJobRepository,
        mapping_repository: IDataMappingRepository,
        connection_repository: IApiConnectionRepository,
        event_publisher: IEventPublisher | None = None,
    ):
        self._access = access
        self._execution_service = execution_service
        self._recorder = recorder
        self._sync_job_repository = sync_job_repository
        self._mapping_repository = mapping_repository
        self._connection_repository = connection_repository
        self._event_publisher = event_publisher

    async def _handle(self, command: ExecuteSyncJobCommand) -> CommandResult:
        sync_job, integration = await self._access.get_sync_job(
            command.sync_job_id, command.user_id
        )

        started_at = datetime.now(UTC)
        if command.trigger == ExecutionTrigger.SCHEDULED:
            sync_job.start(started_at)
        else:
            sync_job.run_manually(started_at)
        await save_and_publish(self._sync_job_repository, sync_job, self._event_publisher)

        data_mapping = None
        if sync_job.mapping_id is not None:
            data_mapping = await self._mapping_repository.get_by_id(sync_job.mapping_id)
        connections = await self._connection_repository.get_by_integration(integration.id)
        context = ExecutionContext(
            integration_id=integration.id,
            user_id=command.user_id,
            trigger=command.trigger,
            request_data=command.records,
        )

        timeout_seconds = sync_job.timeout_ms / 1000
        try:
            result = await asyncio.wait_for(
                self._execution_service.execute_integration(
                    integration, context, connections, data_mapping
                ),
                timeout=timeout_seconds,
            )
        except TimeoutError:
            message = f"Sync job timed out after {timeout_seconds}s"
            logger.warning(
                "Sync job timed out",
                sync_job_id=str(sync_job.id),
                timeout_seconds=timeout_seconds,
            )
            integration.record_execution(False, 0.0, message)
            execution_id = generate_execution_id()
            finished_at = datetime.now(UTC)
            will_retry = sync_job.fail([message], finished_at, execution_id=execution_id)
            await save_and_publish(self._sync_job_repository, sync_job, self._event_publisher)
            await self._recorder.record(
                integration,
                execution_id=execution_id,
                trigger=command.trigger,
                success=False,
                response_time=0.0,
                start_time=started_at,
                end_time=finished_at,
                errors=[message],
            )
            return self._failure(message, sync_job, will_retry, None)

        for connection in connections:
            await self._connection_repository.save(connection)

        processed = result.metrics.records_processed
        will_retry = False
        if result.success:
            sync_job.complete(
                SyncResult(
                    success=True,
                    start_time=result.start_time,
                    end_time=result.end_time,
                    records_processed=processed,
                    records_succeeded=processed,
                    execution_id=result.execution_id,
                ),
                result.end_time,
            )
        else:
            will_retry = sync_job.fail(
                [error.message for error in result.errors],
                result.end_time,
                records_processed=processed,
                execution_id=result.execution_id,
            )
        await save_and_publish(self._sync_job_repository, sync_job, self._event_publisher)

        await self._recorder.record(
            integration,
            execution_id=result.execution_id,
            trigger=command.trigger,
            success=result.success,
            response_time=result.recorded_response_time,
            start_time=result.start_time,
            end_time=result.end_time,
            requests_count=result.requests_count,
            records_processed=processed,
            errors=[error.message for error in result.errors],
        )

        logger.info(
            "Sync job run finished",
            sync_job_id=str(sync_job.id),
            execution_id=result.execution_id,
            success=result.success,
            status=sync_job.status.value,
            records_processed=processed,
        )
        if not result.success:
            return self._failure(result.errors[0].message, sync_job, will_retry, result)
        return CommandResult.success_result(
            {"syncJob": sync_job.to_dict(), "execution": result.to_dict()},
            warnings=result.warnings,
        )

    @staticmethod
    def _failure(
        message: str, sync_job: Any, will_retry: bool, result: Any
    ) -> CommandResult:
        warnings = []
        if will_retry and sync_job.next_run_at is not None:
            warnings.append(f"Retry scheduled at {sync_job.next_run_at.isoformat()}")
        return CommandResult.failure_result(
            message,
            SYNC_FAILED_CODE,
            warnings=warnings,
            data={
                "syncJob": sync_job.to_dict(),
                "execution": result.to_dict() if result is not None else None,
                "willRetry": will_retry,
            },
        )

    @property
    def command_type(self) -> type[ExecuteSyncJobCommand]:
        return ExecuteSyncJobCommand
