"""
Production Service

Drives a production run through mixing, division, proofing and baking:
- Records the mixed dough (quality, temperature, mix time)
- Tracks the product batches divided from it
- Starts proof timers, then bake timers with a tray rotation reminder
- Tracks dough age since mixing
- Saves the finished run
"""
import logging
import math
from typing import Iterable, List, Optional

from proofmaster.config import ProductionSettings
from proofmaster.infra.supabase.repositories.production_runs import ProductionRunRepository
from proofmaster.models.notification import NotificationSeverity
from proofmaster.models.production import (
    BatchStatus,
    DoughAge,
    DoughAgeLevel,
    DoughBatch,
    DoughQuality,
    PlannedProduct,
    ProductBatch,
    ProductionRun,
    ProductionRunRecord,
    ProofQuality,
    RunStatus,
)
from proofmaster.models.timer import TimerConfig, TimerKind
from proofmaster.services.notification_service import Notifier
from proofmaster.services.timer.timer_registry import TimerRegistry
from proofmaster.utils.time_format import format_time, generate_run_id

logger = logging.getLogger(__name__)

DOUGH_AGE_WARNING_RATIO = 0.6
DOUGH_AGE_DANGER_RATIO = 0.8


class ProductionError(ValueError):
    """A production step was requested in the wrong state"""


class NoActiveRunError(ProductionError):
    def __init__(self):
        super().__init__("No production run in progress")


class BatchNotFoundError(ProductionError):
    def __init__(self, product_id: str):
        super().__init__(f"Product {product_id} is not part of the current run")
        self.product_id = product_id


class PoorDoughQualityError(ProductionError):
    def __init__(self):
        super().__init__("Poor quality dough must be confirmed before dividing")


class PersistenceUnavailableError(ProductionError):
    def __init__(self):
        super().__init__("Production run storage is not configured")


def proof_timer_id(product_id: str) -> str:
    return f"proof-{product_id}"


def bake_timer_id(product_id: str) -> str:
    return f"bake-{product_id}"


class ProductionService:
    """Service for the proof -> bake workflow of the current production run"""

    def __init__(
        self,
        registry: TimerRegistry,
        notifier: Notifier,
        settings: Optional[ProductionSettings] = None,
        run_repository: Optional[ProductionRunRepository] = None,
    ):
        self._registry = registry
        self._clock = registry.clock
        self._notifier = notifier
        self._settings = settings or ProductionSettings()
        self._run_repository = run_repository
        self._current_run: Optional[ProductionRun] = None

    @property
    def current_run(self) -> Optional[ProductionRun]:
        return self._current_run.model_copy(deep=True) if self._current_run else None

    def start_run(self, products: List[PlannedProduct]) -> ProductionRun:
        """
        Start a run: the dough goes into the mixer and each planned product is queued for division.

        Args:
            products: Products divided from this dough

        Returns:
            The new run

        Raises:
            ProductionError: a run is already in progress, or the product list is empty or repeats a product
        """
        if self._current_run is not None:
            raise ProductionError(f"Production run {self._current_run.run_id} is already in progress")
        if not products:
            raise ProductionError("A production run needs at least one product")

        product_ids = [p.product_id for p in products]
        if len(set(product_ids)) != len(product_ids):
            raise ProductionError("Each product can only appear once in a run")

        now = self._clock.now()
        dough_total = sum(p.dough_needed for p in products)
        run = ProductionRun(
            run_id=generate_run_id(now),
            created_at=now,
            dough_total=dough_total,
            dough_remaining=dough_total,
            dough_batch=DoughBatch(total_weight=dough_total),
            batches=[
                ProductBatch(
                    product_id=p.product_id,
                    name=p.name,
                    pieces=p.pieces,
                    dough_needed=p.dough_needed,
                )
                for p in products
            ],
        )
        self._current_run = run

        logger.info(f"Production run {run.run_id} started with {len(run.batches)} batches, {dough_total}g dough")
        self._notifier.notify(f"Production run {run.run_id} started", NotificationSeverity.SUCCESS)
        return self.current_run

    def start_mix_timer(self) -> ProductionRun:
        """Start timing the mix. Calling it again while the mix is timed changes nothing."""
        run = self._require_status(RunStatus.MIXING)
        if run.dough_batch.mix_started_at is None:
            run.dough_batch.mix_started_at = self._clock.now()
            self._notifier.notify("Mix timer started")
        return run.model_copy(deep=True)

    def reset_mix_timer(self) -> ProductionRun:
        run = self._require_status(RunStatus.MIXING)
        run.dough_batch.mix_started_at = None
        return run.model_copy(deep=True)

    def complete_mixing(
        self,
        quality: DoughQuality,
        temperature: Optional[float] = None,
        notes: str = "",
        confirm_poor_quality: bool = False,
    ) -> ProductionRun:
        """
        Record the mixed dough and move the run on to division.

        Dough age is measured from this moment.

        Args:
            quality: Baker's rating of the dough
            temperature: Dough temperature in °C
            notes: Free-form mixing notes
            confirm_poor_quality: Must be set to continue with poor dough

        Returns:
            The run, now dividing

        Raises:
            ProductionError: no run in the mixing phase, or poor dough not confirmed
        """
        run = self._require_status(RunStatus.MIXING)
        quality = DoughQuality(quality)
        if quality == DoughQuality.POOR and not confirm_poor_quality:
            raise PoorDoughQualityError()

        now = self._clock.now()
        dough = run.dough_batch
        dough.mix_completed_at = now
        dough.quality = quality
        dough.temperature = temperature
        dough.notes = notes
        if dough.mix_started_at is not None:
            dough.mix_duration_minutes = math.floor((now - dough.mix_started_at).total_seconds() / 60)

        run.status = RunStatus.DIVIDING
        run.dough_started_at = now

        logger.info(f"Mixing complete for run {run.run_id}: {quality.value} dough")
        self._notifier.notify("Mixing complete! Starting division phase.", NotificationSeverity.SUCCESS)
        return run.model_copy(deep=True)

    def start_proofing(
        self,
        product_id: str,
        proof_minutes: Optional[int] = None,
        pieces_actual: Optional[int] = None,
        issues: Iterable[str] = (),
    ) -> ProductBatch:
        """
        Finish dividing a batch and put it in the proofer.

        Args:
            product_id: Batch to proof
            proof_minutes: Proof time, defaults to the configured proof time
            pieces_actual: Pieces actually made, defaults to the planned count
            issues: Division issues noted by the baker (sticky, tearing, uneven)

        Returns:
            The updated batch

        Raises:
            ProductionError: no run, unknown product or batch not queued
            InvalidTimerConfigError: proof time is not positive
        """
        run = self._require_status(RunStatus.DIVIDING)
        batch = self._require_batch(run, product_id)
        if batch.status != BatchStatus.QUEUED:
            raise ProductionError(f"{batch.name} is already {batch.status.value}")
        if pieces_actual is not None and pieces_actual <= 0:
            raise ProductionError(f"{batch.name}: pieces made must be positive, got {pieces_actual}")

        minutes = proof_minutes or self._settings.default_proof_minutes
        self._registry.start(TimerConfig(
            id=proof_timer_id(product_id),
            product_id=product_id,
            name=batch.name,
            kind=TimerKind.PROOFING,
            duration_seconds=minutes * 60,
            on_complete=lambda: self._on_proof_complete(run, product_id),
        ))

        now = self._clock.now()
        batch.pieces_actual = pieces_actual if pieces_actual is not None else batch.pieces
        batch.issues = list(issues)
        batch.status = BatchStatus.PROOFING
        batch.proof_started = now

        used = batch.pieces_actual * (batch.dough_needed / batch.pieces)
        run.dough_remaining = max(0.0, run.dough_remaining - used)

        self._notifier.notify(f"{batch.name} now proofing for {minutes} minutes", NotificationSeverity.SUCCESS)
        return batch.model_copy(deep=True)

    def start_baking(
        self,
        product_id: str,
        bake_minutes: Optional[int] = None,
        rotate_at_minutes: Optional[int] = None,
        proof_quality: Optional[ProofQuality] = None,
        oven_temp_top: Optional[float] = None,
        oven_temp_bottom: Optional[float] = None,
    ) -> ProductBatch:
        """
        Put a proofed batch in the oven with a tray rotation reminder.

        Raises:
            ProductionError: no run, unknown product or batch not proofed
            InvalidTimerConfigError: bake time is not positive
        """
        run = self._require_status(RunStatus.DIVIDING)
        batch = self._require_batch(run, product_id)
        if batch.status != BatchStatus.PROOFED:
            raise ProductionError(f"{batch.name} cannot go in the oven while {batch.status.value}")

        minutes = bake_minutes or self._settings.default_bake_minutes
        rotate_at = rotate_at_minutes or self._settings.default_rotate_at_minutes
        self._registry.start(TimerConfig(
            id=bake_timer_id(product_id),
            product_id=product_id,
            name=batch.name,
            kind=TimerKind.BAKING,
            duration_seconds=minutes * 60,
            rotate_at_seconds=rotate_at * 60,
            on_complete=lambda: self._on_bake_complete(run, product_id),
        ))

        batch.proof_quality = proof_quality
        batch.oven_temp_top = oven_temp_top if oven_temp_top is not None else self._settings.default_oven_temp
        batch.oven_temp_bottom = (
            oven_temp_bottom if oven_temp_bottom is not None else self._settings.default_oven_temp
        )
        batch.bake_started = self._clock.now()
        batch.status = BatchStatus.BAKING

        self._notifier.notify(f"{batch.name} baking for {minutes} minutes", NotificationSeverity.SUCCESS)
        return batch.model_copy(deep=True)

    def dough_age(self) -> DoughAge:
        """How long ago the dough was mixed, with warning levels at 60% and 80% of the limit"""
        run = self._require_status(RunStatus.DIVIDING)
        elapsed = math.floor((self._clock.now() - run.dough_started_at).total_seconds())
        max_age = self._settings.max_dough_age_minutes * 60

        if elapsed > max_age * DOUGH_AGE_DANGER_RATIO:
            level = DoughAgeLevel.DANGER
        elif elapsed > max_age * DOUGH_AGE_WARNING_RATIO:
            level = DoughAgeLevel.WARNING
        else:
            level = DoughAgeLevel.NORMAL

        return DoughAge(
            elapsed_seconds=elapsed,
            elapsed_display=format_time(elapsed),
            max_age_seconds=max_age,
            level=level,
        )

    async def complete_run(self) -> ProductionRun:
        """
        Close the division phase and save the run.

        Timers still running keep going; their completion alerts still fire.

        Raises:
            NoActiveRunError: nothing to complete
            Exception: the save failed; the run stays open so it can be retried
        """
        run = self._require_status(RunStatus.DIVIDING)
        run.status = RunStatus.COMPLETED
        run.completed_at = self._clock.now()

        if self._run_repository is None:
            logger.warning(f"Production run {run.run_id} not saved: storage is not configured")
        else:
            try:
                await self._run_repository.create(run)
            except Exception as e:
                logger.error(f"Error saving production run {run.run_id}: {e}", exc_info=True)
                run.status = RunStatus.DIVIDING
                run.completed_at = None
                self._notifier.notify("Failed to save production run", NotificationSeverity.ERROR)
                raise
            self._notifier.notify("Production run saved", NotificationSeverity.SUCCESS)

        self._current_run = None
        logger.info(f"Production run {run.run_id} completed")
        self._notifier.notify("Production run complete!", NotificationSeverity.SUCCESS)
        return run.model_copy(deep=True)

    async def recent_runs(self, limit: int = 20) -> List[ProductionRunRecord]:
        """Saved runs, newest first"""
        if self._run_repository is None:
            raise PersistenceUnavailableError()
        return await self._run_repository.find_recent(limit)

    # --- Timer callbacks ---

    def _on_proof_complete(self, run: ProductionRun, product_id: str):
        batch = run.find_batch(product_id)
        if batch is None:
            return

        batch.proof_completed = self._clock.now()
        batch.status = BatchStatus.PROOFED
        logger.info(f"Proofing complete for {product_id} in run {run.run_id}")
        self._notifier.alert(
            f"{batch.name} Ready!",
            "Proofing complete - ready for baking. Preheat oven if needed.",
        )

    def _on_bake_complete(self, run: ProductionRun, product_id: str):
        batch = run.find_batch(product_id)
        if batch is None:
            return

        batch.bake_completed = self._clock.now()
        batch.status = BatchStatus.COMPLETED
        logger.info(f"Baking complete for {product_id} in run {run.run_id}")
        self._notifier.alert(f"{batch.name} Done!", "Baking complete - remove from oven now!")
        self._notifier.notify(f"{batch.name} baking complete!", NotificationSeverity.SUCCESS)

    # --- Helpers ---

    def _require_run(self) -> ProductionRun:
        if self._current_run is None:
            raise NoActiveRunError()
        return self._current_run

    def _require_status(self, status: RunStatus) -> ProductionRun:
        run = self._require_run()
        if run.status != status:
            raise ProductionError(f"Production run {run.run_id} is {run.status.value}, not {status.value}")
        return run

    @staticmethod
    def _require_batch(run: ProductionRun, product_id: str) -> ProductBatch:
        batch = run.find_batch(product_id)
        if batch is None:
            raise BatchNotFoundError(product_id)
        return batch
