from .production_service import (
    BatchNotFoundError,
    NoActiveRunError,
    PersistenceUnavailableError,
    PoorDoughQualityError,
    ProductionError,
    ProductionService,
    bake_timer_id,
    proof_timer_id,
)

__all__ = [
    "BatchNotFoundError",
    "NoActiveRunError",
    "PersistenceUnavailableError",
    "PoorDoughQualityError",
    "ProductionError",
    "ProductionService",
    "bake_timer_id",
    "proof_timer_id",
]
