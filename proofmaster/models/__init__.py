"""Domain models for the application"""
from .timer import (
    Timer, TimerConfig, TimerKind, TimerStatus, TimerStartRequest, TimerExtendRequest,
    TimerCount, TimerCard, DashboardTimerRow, TimerBoard,
)
from .notification import Notification, NotificationChannel, NotificationSeverity
from .production import (
    BatchStatus, CompleteMixingRequest, DoughAge, DoughAgeLevel, DoughBatch, DoughQuality,
    PlannedProduct, ProductBatch, ProductionRun, ProductionRunRecord, ProofQuality, RunStatus,
    StartBakingRequest, StartProofingRequest, StartRunRequest,
)

__all__ = [
    'Timer', 'TimerConfig', 'TimerKind', 'TimerStatus', 'TimerStartRequest', 'TimerExtendRequest',
    'TimerCount', 'TimerCard', 'DashboardTimerRow', 'TimerBoard',
    'Notification', 'NotificationChannel', 'NotificationSeverity',
    'BatchStatus', 'CompleteMixingRequest', 'DoughAge', 'DoughAgeLevel', 'DoughBatch', 'DoughQuality',
    'PlannedProduct', 'ProductBatch', 'ProductionRun',
    'ProductionRunRecord', 'ProofQuality', 'RunStatus',
    'StartBakingRequest', 'StartProofingRequest', 'StartRunRequest',
]
