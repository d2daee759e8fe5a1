"""Service layer: inventory access and orchestrator wiring."""
from kisanai.services.inventory_service import InventoryService, inventory_scope
from kisanai.services.orchestrator_service import OrchestratorService

__all__ = [
    "InventoryService",
    "inventory_scope",
    "OrchestratorService",
]
