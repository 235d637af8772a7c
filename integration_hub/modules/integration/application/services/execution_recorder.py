"""Persistence of execution outcomes.

After an execution the integration carries freshly folded metrics. Saving
it races with any other writer of the same integration, so a version
conflict reloads the stored copy, folds the same outcome into it and
tries again, a bounded number of times.
"""

from datetime import datetime

from integration_hub.core.config import ExecutionConfig
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.domain.aggregates import Integration
from integration_hub.modules.integration.domain.enums import ExecutionTrigger
from integration_hub.modules.integration.domain.errors import (
    ConcurrencyConflictError,
    IntegrationNotFoundError,
)
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IExecutionHistoryRepository,
    IIntegrationRepository,
)
from integration_hub.modules.integration.domain.interfaces.services import (
    IEventPublisher,
)
from integration_hub.modules.integration.domain.value_objects import ExecutionRecord

logger = get_logger(__name__)


class ExecutionRecorder:
    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        history_repository: IExecutionHistoryRepository,
        event_publisher: IEventPublisher | None = None,
        config: ExecutionConfig | None = None,
    ):
        self._integrations = integration_repository
        self._history = history_repository
        self._publisher = event_publisher
        self._config = config or ExecutionConfig()

    async def record(
        self,
        integration: Integration,
        *,
        execution_id: str,
        trigger: ExecutionTrigger,
        success: bool,
        response_time: float,
        start_time: datetime,
        end_time: datetime,
        requests_count: int = 0,
        records_processed: int = 0,
        errors: list[str] | None = None,
    ) -> Integration:
        """Save an integration whose outcome is already recorded, and log it.

        Returns:
            The integration as saved, which is a reloaded copy if a
            conflict had to be resolved

        Raises:
            ConcurrencyConflictError: If every retry conflicted
        """
        errors = list(errors or [])
        current = integration
        attempts = self._config.save_conflict_retries

        for attempt in range(1, attempts + 1):
            try:
                await self._integrations.save(current)
                break
            except ConcurrencyConflictError:
                if attempt == attempts:
                    raise
                logger.warning(
                    "Execution outcome conflicted with a concurrent update, retrying",
                    integration_id=str(integration.id),
                    execution_id=execution_id,
                    attempt=attempt,
                )
                fresh = await self._integrations.get_by_id(integration.id)
                if fresh is None:
                    raise IntegrationNotFoundError(integration.id) from None
                fresh.record_execution(
                    success, response_time, errors[0] if errors else None, at=end_time
                )
                current = fresh

        events = current.clear_events()
        if current is not integration:
            integration.clear_events()
        if self._publisher is not None and events:
            await self._publisher.publish(events)

        await self._history.add(
            ExecutionRecord(
                execution_id=execution_id,
                integration_id=integration.id,
                trigger=trigger,
                success=success,
                start_time=start_time,
                end_time=end_time,
                requests_count=requests_count,
                records_processed=records_processed,
                errors=tuple(errors),
            )
        )
        return current
