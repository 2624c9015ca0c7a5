"""Application layer module.

Contains application services (use cases) that orchestrate
domain logic and infrastructure.
"""

from gardenshare.application.garden_service import GardenResult, GardenService
from gardenshare.application.land_request_service import (
    DecideLandRequestResult,
    LandRequestResult,
    LandRequestService,
    ListAllocationsResult,
)
from gardenshare.application.ledger import GardenCapacityLedger
from gardenshare.application.notifications import (
    NotificationService,
    NotificationSink,
    UnitOfWorkNotificationSink,
    publish_notifications,
)
from gardenshare.application.sweep import SweepResult, SweepScheduler, run_sweep

__all__ = [
    "DecideLandRequestResult",
    "GardenCapacityLedger",
    "GardenResult",
    "GardenService",
    "LandRequestResult",
    "LandRequestService",
    "ListAllocationsResult",
    "NotificationService",
    "NotificationSink",
    "SweepResult",
    "SweepScheduler",
    "UnitOfWorkNotificationSink",
    "publish_notifications",
    "run_sweep",
]
