"""Integration module wiring.

``IntegrationModule`` builds the repositories, services and handlers of
the module and registers every handler on a command bus and a query bus.
"""

from integration_hub.core.config import Settings, get_settings
from integration_hub.core.cqrs.base import CommandBus, QueryBus
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.application.commands import (
    ActivateIntegrationCommandHandler,
    CloneIntegrationCommandHandler,
    CreateDataMappingCommandHandler,
    CreateIntegrationCommandHandler,
    CreateSyncJobCommandHandler,
    DeactivateIntegrationCommandHandler,
    DeleteDataMappingCommandHandler,
    DeleteIntegrationCommandHandler,
    DeleteSyncJobCommandHandler,
    ExecuteIntegrationCommandHandler,
    ExecuteSyncJobCommandHandler,
    RefreshCredentialsCommandHandler,
    TestIntegrationCommandHandler,
    UpdateDataMappingCommandHandler,
    UpdateIntegrationCommandHandler,
    UpdateSyncJobCommandHandler,
)
from integration_hub.modules.integration.application.queries import (
    GetAvailableIntegrationTypesQueryHandler,
    GetDataMappingQueryHandler,
    GetDataMappingsByIntegrationQueryHandler,
    GetExecutionHistoryQueryHandler,
    GetIntegrationHealthQueryHandler,
    GetIntegrationMetricsQueryHandler,
    GetIntegrationQueryHandler,
    GetIntegrationStatsQueryHandler,
    GetIntegrationsByUserQueryHandler,
    GetSyncJobQueryHandler,
    GetSyncJobsByIntegrationQueryHandler,
    GetUpcomingSyncJobsQueryHandler,
    SearchIntegrationsQueryHandler,
    ValidateDataMappingQueryHandler,
)
from integration_hub.modules.integration.application.services import (
    ExecutionRecorder,
    IntegrationAccessService,
)
from integration_hub.modules.integration.domain.interfaces.services import (
    ICredentialRefresher,
    IEventPublisher,
    IHttpTransport,
    IOwnershipVerifier,
)
from integration_hub.modules.integration.domain.services import (
    DataTransformationService,
    IntegrationExecutionService,
)
from integration_hub.modules.integration.infrastructure.repositories import (
    InMemoryApiConnectionRepository,
    InMemoryDataMappingRepository,
    InMemoryExecutionHistoryRepository,
    InMemoryIntegrationRepository,
    InMemorySyncJobRepository,
)
from integration_hub.modules.integration.infrastructure.services import (
    InMemoryEventPublisher,
    OwnerOnlyVerifier,
)

logger = get_logger(__name__)


class IntegrationModule:
    """Composition root for the integration module.

    Without a transport executions are dry runs. Without a credential
    refresher, refreshing credentials fails with a configuration error.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: IHttpTransport | None = None,
        credential_refresher: ICredentialRefresher | None = None,
        ownership_verifier: IOwnershipVerifier | None = None,
        event_publisher: IEventPublisher | None = None,
    ):
        self.settings = settings or get_settings()
        execution_config = self.settings.execution

        self.integration_repository = InMemoryIntegrationRepository()
        self.mapping_repository = InMemoryDataMappingRepository()
        self.sync_job_repository = InMemorySyncJobRepository()
        self.connection_repository = InMemoryApiConnectionRepository()
        self.history_repository = InMemoryExecutionHistoryRepository(execution_config)
        self.event_publisher = event_publisher or InMemoryEventPublisher()

        self.transformation_service = DataTransformationService()
        self.execution_service = IntegrationExecutionService(
            transport=transport, transformation_service=self.transformation_service
        )
        self.access = IntegrationAccessService(
            self.integration_repository,
            ownership_verifier or OwnerOnlyVerifier(),
            mapping_repository=self.mapping_repository,
            sync_job_repository=self.sync_job_repository,
        )
        self.recorder = ExecutionRecorder(
            self.integration_repository,
            self.history_repository,
            event_publisher=self.event_publisher,
            config=execution_config,
        )
        self.credential_refresher = credential_refresher

        self.command_bus = CommandBus()
        self.query_bus = QueryBus()
        self._register_command_handlers()
        self._register_query_handlers()

        logger.info(
            "Integration module configured",
            dry_run=transport is None,
            credential_refresh=credential_refresher is not None,
        )

    def _register_command_handlers(self) -> None:
        access = self.access
        integrations = self.integration_repository
        mappings = self.mapping_repository
        sync_jobs = self.sync_job_repository
        connections = self.connection_repository
        publisher = self.event_publisher

        handlers = [
            CreateIntegrationCommandHandler(integrations, publisher),
            UpdateIntegrationCommandHandler(access, integrations, publisher),
            ActivateIntegrationCommandHandler(access, integrations, publisher),
            DeactivateIntegrationCommandHandler(access, integrations, publisher),
            CloneIntegrationCommandHandler(access, integrations, publisher),
            DeleteIntegrationCommandHandler(
                access,
                integrations,
                mappings,
                sync_jobs,
                connections,
                self.history_repository,
            ),
            ExecuteIntegrationCommandHandler(
                access, self.execution_service, self.recorder, connections, mappings
            ),
            TestIntegrationCommandHandler(
                access, self.execution_service, self.recorder, connections
            ),
            RefreshCredentialsCommandHandler(
                access, integrations, connections, self.credential_refresher, publisher
            ),
            CreateDataMappingCommandHandler(access, mappings, publisher),
            UpdateDataMappingCommandHandler(access, mappings, publisher),
            DeleteDataMappingCommandHandler(access, mappings, sync_jobs),
            CreateSyncJobCommandHandler(access, sync_jobs, mappings, publisher),
            UpdateSyncJobCommandHandler(access, sync_jobs, mappings, publisher),
            ExecuteSyncJobCommandHandler(
                access,
                self.execution_service,
                self.recorder,
                sync_jobs,
                mappings,
                connections,
                publisher,
            ),
            DeleteSyncJobCommandHandler(access, sync_jobs),
        ]
        for handler in handlers:
            self.command_bus.register(handler)

    def _register_query_handlers(self) -> None:
        access = self.access
        config = self.settings.execution

        handlers = [
            GetIntegrationQueryHandler(
                access,
                self.mapping_repository,
                self.sync_job_repository,
                self.connection_repository,
            ),
            GetIntegrationsByUserQueryHandler(self.integration_repository, config),
            SearchIntegrationsQueryHandler(self.integration_repository, config),
            GetIntegrationHealthQueryHandler(
                access, self.execution_service, self.connection_repository
            ),
            GetIntegrationMetricsQueryHandler(access, self.history_repository),
            GetExecutionHistoryQueryHandler(access, self.history_repository, config),
            GetIntegrationStatsQueryHandler(self.integration_repository),
            GetAvailableIntegrationTypesQueryHandler(),
            GetDataMappingQueryHandler(access),
            GetDataMappingsByIntegrationQueryHandler(access, self.mapping_repository),
            ValidateDataMappingQueryHandler(access, self.transformation_service),
            GetSyncJobQueryHandler(access),
            GetSyncJobsByIntegrationQueryHandler(access, self.sync_job_repository),
            GetUpcomingSyncJobsQueryHandler(
                access, self.integration_repository, self.sync_job_repository
            ),
        ]
        for handler in handlers:
            self.query_bus.register(handler)
