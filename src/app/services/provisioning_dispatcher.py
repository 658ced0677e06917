from abc import ABC, abstractmethod
from uuid import UUID

from src.app.services.background_jobs import BackgroundJobRunner
from src.app.services.provisioning_orchestrator import ProvisioningOrchestrator


class IProvisioningDispatcher(ABC):
    """Hands a freshly created tenant to provisioning without waiting for it"""

    @abstractmethod
    def dispatch(self, tenant_id: UUID) -> None:
        pass


class BackgroundProvisioningDispatcher(IProvisioningDispatcher):
    def __init__(self, runner: BackgroundJobRunner, orchestrator: ProvisioningOrchestrator):
        self.runner = runner
        self.orchestrator = orchestrator

    def dispatch(self, tenant_id: UUID) -> None:
        self.runner.spawn(self.orchestrator.provision(tenant_id), name=f"provision-{tenant_id}")
