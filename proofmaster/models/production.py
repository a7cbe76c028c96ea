"""Production run models"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class RunStatus(str, Enum):
    MIXING = "mixing"
    DIVIDING = "dividing"
    COMPLETED = "completed"


class BatchStatus(str, Enum):
    """Where a product batch is in the proof -> bake flow"""
    QUEUED = "queued"
    PROOFING = "proofing"
    PROOFED = "proofed"
    BAKING = "baking"
    COMPLETED = "completed"


class DoughQuality(str, Enum):
    """Baker's rating of the mixed dough"""
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class ProofQuality(str, Enum):
    PERFECT = "perfect"
    GOOD = "good"
    UNDER = "under"
    OVER = "over"


class DoughAgeLevel(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    DANGER = "danger"


class PlannedProduct(BaseModel):
    """A product planned from the mixed dough"""
    product_id: str
    name: str
    pieces: int = Field(gt=0)
    dough_needed: float = Field(ge=0, description="Grams of dough for all pieces")


class DoughBatch(BaseModel):
    """The mixed dough a run is divided from"""
    total_weight: float = Field(description="Grams of dough mixed")
    mix_started_at: Optional[datetime] = None
    mix_completed_at: Optional[datetime] = None
    mix_duration_minutes: Optional[int] = None
    quality: Optional[DoughQuality] = None
    temperature: Optional[float] = Field(None, description="Dough temperature in °C")
    notes: str = ""


class ProductBatch(BaseModel):
    product_id: str
    name: str
    pieces: int
    dough_needed: float
    status: BatchStatus = BatchStatus.QUEUED
    pieces_actual: Optional[int] = None
    issues: List[str] = Field(default_factory=list)
    proof_started: Optional[datetime] = None
    proof_completed: Optional[datetime] = None
    proof_quality: Optional[ProofQuality] = None
    bake_started: Optional[datetime] = None
    bake_completed: Optional[datetime] = None
    oven_temp_top: Optional[float] = None
    oven_temp_bottom: Optional[float] = None


class ProductionRun(BaseModel):
    run_id: str
    status: RunStatus = RunStatus.MIXING
    dough_started_at: Optional[datetime] = None  # set when mixing is complete
    created_at: datetime
    completed_at: Optional[datetime] = None
    dough_total: float = 0
    dough_remaining: float = 0
    dough_batch: Optional[DoughBatch] = None
    batches: List[ProductBatch] = Field(default_factory=list)

    def find_batch(self, product_id: str) -> Optional[ProductBatch]:
        for batch in self.batches:
            if batch.product_id == product_id:
                return batch
        return None


class ProductionRunRecord(BaseModel):
    """A saved production run as stored in the database"""
    id: int
    run_id: str
    status: RunStatus
    dough_started_at: Optional[datetime] = None
    created_at: datetime
    completed_at: Optional[datetime] = None
    dough_total: float = 0
    dough_remaining: float = 0
    dough_batch: Optional[DoughBatch] = None
    batches: List[ProductBatch] = Field(default_factory=list)

    class Config:
        from_attributes = True


class DoughAge(BaseModel):
    elapsed_seconds: int
    elapsed_display: str
    max_age_seconds: int
    level: DoughAgeLevel


# API schemas

class StartRunRequest(BaseModel):
    products: List[PlannedProduct]


class CompleteMixingRequest(BaseModel):
    quality: DoughQuality
    temperature: Optional[float] = None
    notes: str = ""
    confirm_poor_quality: bool = Field(False, description="Required to continue with poor dough")


class StartProofingRequest(BaseModel):
    pieces_actual: Optional[int] = Field(None, gt=0)
    issues: List[str] = Field(default_factory=list)
    proof_minutes: Optional[int] = None


class StartBakingRequest(BaseModel):
    proof_quality: Optional[ProofQuality] = None
    oven_temp_top: Optional[float] = None
    oven_temp_bottom: Optional[float] = None
    bake_minutes: Optional[int] = None
    rotate_at_minutes: Optional[int] = None
