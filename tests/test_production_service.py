"""Tests for the proof -> bake workflow of a production run."""
import asyncio

import pytest

from proofmaster.config import ProductionSettings
from proofmaster.models.notification import NotificationSeverity
from proofmaster.models.production import (
    BatchStatus,
    DoughAgeLevel,
    DoughQuality,
    PlannedProduct,
    ProofQuality,
    RunStatus,
)
from proofmaster.services.production.production_service import (
    BatchNotFoundError,
    NoActiveRunError,
    PersistenceUnavailableError,
    PoorDoughQualityError,
    ProductionError,
    ProductionService,
)
from proofmaster.services.timer.errors import DuplicateTimerError


class FakeRunRepository:
    def __init__(self, fail=False):
        self.fail = fail
        self.saved = []

    async def create(self, run):
        if self.fail:
            raise RuntimeError("database unavailable")
        self.saved.append(run.model_copy(deep=True))
        return run

    async def find_recent(self, limit=20):
        return self.saved[-limit:][::-1]


def pandesal(pieces=40, dough_needed=2000.0):
    return PlannedProduct(product_id="p1", name="Pandesal", pieces=pieces, dough_needed=dough_needed)


def ensaymada():
    return PlannedProduct(product_id="p2", name="Ensaymada", pieces=12, dough_needed=900.0)


def start_dividing(service, products):
    service.start_run(products)
    return service.complete_mixing(DoughQuality.GOOD, temperature=26.5)


class TestStartRun:
    def test_batches_queued(self, production, notifier):
        run = production.start_run([pandesal(), ensaymada()])

        assert run.status == RunStatus.MIXING
        assert run.run_id.startswith("PR-20250301-")
        assert run.dough_total == 2900
        assert run.dough_remaining == 2900
        assert run.dough_batch.total_weight == 2900
        assert run.dough_started_at is None
        assert [b.status for b in run.batches] == [BatchStatus.QUEUED, BatchStatus.QUEUED]
        assert notifier.toasts == [(f"Production run {run.run_id} started", NotificationSeverity.SUCCESS)]

    def test_only_one_run_at_a_time(self, production):
        production.start_run([pandesal()])
        with pytest.raises(ProductionError):
            production.start_run([ensaymada()])

    def test_empty_run_rejected(self, production):
        with pytest.raises(ProductionError):
            production.start_run([])
        assert production.current_run is None

    def test_repeated_product_rejected(self, production):
        with pytest.raises(ProductionError):
            production.start_run([pandesal(), pandesal()])

    def test_current_run_is_a_copy(self, production):
        production.start_run([pandesal()])
        production.current_run.batches[0].status = BatchStatus.COMPLETED
        assert production.current_run.batches[0].status == BatchStatus.QUEUED


class TestMixing:
    def test_complete_mixing_records_dough(self, production, clock, notifier):
        production.start_run([pandesal()])
        production.start_mix_timer()
        clock.advance(12 * 60 + 30)

        run = production.complete_mixing(DoughQuality.EXCELLENT, temperature=27.0, notes="a bit tacky")

        assert run.status == RunStatus.DIVIDING
        assert run.dough_started_at == clock.now()
        dough = run.dough_batch
        assert dough.quality == DoughQuality.EXCELLENT
        assert dough.temperature == 27.0
        assert dough.notes == "a bit tacky"
        assert dough.mix_completed_at == clock.now()
        assert dough.mix_duration_minutes == 12
        assert notifier.messages[-1] == "Mixing complete! Starting division phase."

    def test_mix_duration_unknown_without_timer(self, production):
        production.start_run([pandesal()])
        run = production.complete_mixing(DoughQuality.GOOD)
        assert run.dough_batch.mix_duration_minutes is None
        assert run.dough_batch.temperature is None

    def test_mix_timer_start_is_idempotent_and_resettable(self, production, clock, notifier):
        production.start_run([pandesal()])
        started = production.start_mix_timer().dough_batch.mix_started_at
        clock.advance(60)

        assert production.start_mix_timer().dough_batch.mix_started_at == started
        assert notifier.messages.count("Mix timer started") == 1
        assert production.reset_mix_timer().dough_batch.mix_started_at is None

    def test_poor_dough_needs_confirmation(self, production):
        production.start_run([pandesal()])

        with pytest.raises(PoorDoughQualityError):
            production.complete_mixing(DoughQuality.POOR)
        assert production.current_run.status == RunStatus.MIXING

        run = production.complete_mixing(DoughQuality.POOR, confirm_poor_quality=True)
        assert run.status == RunStatus.DIVIDING
        assert run.dough_batch.quality == DoughQuality.POOR

    def test_division_waits_for_mixing(self, production):
        production.start_run([pandesal()])

        with pytest.raises(ProductionError):
            production.start_proofing("p1")
        with pytest.raises(ProductionError):
            production.dough_age()
        with pytest.raises(ProductionError):
            asyncio.run(production.complete_run())

    def test_mixing_only_once(self, production):
        start_dividing(production, [pandesal()])
        with pytest.raises(ProductionError):
            production.complete_mixing(DoughQuality.GOOD)
        with pytest.raises(ProductionError):
            production.start_mix_timer()


class TestProofToBake:
    def test_full_flow(self, production, registry, scheduler, notifier):
        start_dividing(production, [pandesal()])

        batch = production.start_proofing("p1", proof_minutes=1, pieces_actual=30, issues=["sticky"])
        assert batch.status == BatchStatus.PROOFING
        assert batch.pieces_actual == 30
        assert batch.issues == ["sticky"]
        assert registry.get("proof-p1").duration_seconds == 60
        assert production.current_run.dough_remaining == 500
        assert notifier.messages[-1] == "Pandesal now proofing for 1 minutes"

        scheduler.advance(60)
        assert production.current_run.batches[0].status == BatchStatus.PROOFED
        assert notifier.alerts == [
            ("Pandesal Ready!", "Proofing complete - ready for baking. Preheat oven if needed."),
        ]
        assert registry.get("proof-p1") is None

        batch = production.start_baking("p1", bake_minutes=2, rotate_at_minutes=1, proof_quality=ProofQuality.GOOD)
        assert batch.status == BatchStatus.BAKING
        assert batch.oven_temp_top == 180
        assert batch.oven_temp_bottom == 180
        assert registry.get("bake-p1").rotate_at_seconds == 60

        scheduler.advance(60)
        assert notifier.alerts[-1] == ("Rotate Trays!", "Pandesal: Time to rotate trays")

        scheduler.advance(60)
        finished = production.current_run.batches[0]
        assert finished.status == BatchStatus.COMPLETED
        assert finished.proof_quality == ProofQuality.GOOD
        assert finished.bake_completed is not None
        assert notifier.alerts[-1] == ("Pandesal Done!", "Baking complete - remove from oven now!")
        assert notifier.messages[-1] == "Pandesal baking complete!"
        assert registry.count() == 0

    def test_defaults_used_when_minutes_missing(self, production, registry):
        start_dividing(production, [pandesal()])

        production.start_proofing("p1", proof_minutes=0)

        timer = registry.get("proof-p1")
        assert timer.duration_seconds == 45 * 60
        assert production.current_run.batches[0].pieces_actual == 40
        assert production.current_run.dough_remaining == 0

    @pytest.mark.parametrize("pieces", [0, -5])
    def test_non_positive_pieces_rejected(self, production, registry, pieces):
        start_dividing(production, [pandesal()])

        with pytest.raises(ProductionError):
            production.start_proofing("p1", pieces_actual=pieces)

        assert registry.get("proof-p1") is None
        assert production.current_run.batches[0].status == BatchStatus.QUEUED
        assert production.current_run.dough_remaining == 2000

    def test_default_bake_and_rotation(self, production, registry):
        start_dividing(production, [pandesal()])
        production.start_proofing("p1", proof_minutes=1)
        registry.complete("proof-p1")

        production.start_baking("p1", oven_temp_top=200)

        timer = registry.get("bake-p1")
        assert timer.duration_seconds == 18 * 60
        assert timer.rotate_at_seconds == 9 * 60
        assert production.current_run.batches[0].oven_temp_top == 200

    def test_bake_before_proofed_rejected(self, production):
        start_dividing(production, [pandesal()])
        with pytest.raises(ProductionError):
            production.start_baking("p1")

        production.start_proofing("p1")
        with pytest.raises(ProductionError):
            production.start_baking("p1")

    def test_proof_twice_rejected(self, production):
        start_dividing(production, [pandesal()])
        production.start_proofing("p1")
        with pytest.raises(ProductionError):
            production.start_proofing("p1")

    def test_unknown_product(self, production):
        start_dividing(production, [pandesal()])
        with pytest.raises(BatchNotFoundError):
            production.start_proofing("p9")

    def test_no_run(self, production):
        with pytest.raises(NoActiveRunError):
            production.start_proofing("p1")
        with pytest.raises(NoActiveRunError):
            production.dough_age()

    def test_leftover_timer_blocks_proofing(self, production, registry):
        from proofmaster.models.timer import TimerConfig, TimerKind

        registry.start(TimerConfig(
            id="proof-p1", product_id="p1", name="Manual", kind=TimerKind.PROOFING, duration_seconds=60,
        ))
        start_dividing(production, [pandesal()])

        with pytest.raises(DuplicateTimerError):
            production.start_proofing("p1")
        assert production.current_run.batches[0].status == BatchStatus.QUEUED
        assert production.current_run.dough_remaining == 2000


class TestDoughAge:
    @pytest.mark.parametrize("elapsed, level", [
        (0, DoughAgeLevel.NORMAL),
        (3240, DoughAgeLevel.NORMAL),
        (3241, DoughAgeLevel.WARNING),
        (4320, DoughAgeLevel.WARNING),
        (4321, DoughAgeLevel.DANGER),
    ])
    def test_levels(self, production, clock, elapsed, level):
        start_dividing(production, [pandesal()])
        clock.advance(elapsed)

        age = production.dough_age()

        assert age.elapsed_seconds == elapsed
        assert age.max_age_seconds == 5400
        assert age.level == level

    def test_display(self, registry, notifier, clock):
        service = ProductionService(registry, notifier, ProductionSettings(max_dough_age_minutes=30))
        start_dividing(service, [pandesal()])
        clock.advance(125)

        age = service.dough_age()
        assert age.elapsed_display == "02:05"
        assert age.max_age_seconds == 1800


class TestCompleteRun:
    def test_saved_and_cleared(self, registry, notifier):
        repository = FakeRunRepository()
        service = ProductionService(registry, notifier, run_repository=repository)
        start_dividing(service, [pandesal()])

        run = asyncio.run(service.complete_run())

        assert run.status == RunStatus.COMPLETED
        assert run.completed_at is not None
        assert [r.run_id for r in repository.saved] == [run.run_id]
        assert service.current_run is None
        assert notifier.messages[-2:] == ["Production run saved", "Production run complete!"]

    def test_running_timers_still_alert_after_completion(self, registry, scheduler, notifier):
        service = ProductionService(registry, notifier, run_repository=FakeRunRepository())
        start_dividing(service, [pandesal()])
        service.start_proofing("p1", proof_minutes=1)

        asyncio.run(service.complete_run())
        scheduler.advance(60)

        assert notifier.alerts[-1][0] == "Pandesal Ready!"

    def test_failed_save_keeps_run_open(self, registry, notifier):
        service = ProductionService(registry, notifier, run_repository=FakeRunRepository(fail=True))
        start_dividing(service, [pandesal()])

        with pytest.raises(RuntimeError):
            asyncio.run(service.complete_run())

        run = service.current_run
        assert run is not None
        assert run.status == RunStatus.DIVIDING
        assert run.completed_at is None
        assert notifier.toasts[-1] == ("Failed to save production run", NotificationSeverity.ERROR)

    def test_without_storage(self, production, notifier):
        start_dividing(production, [pandesal()])

        asyncio.run(production.complete_run())

        assert production.current_run is None
        assert "Production run saved" not in notifier.messages
        assert notifier.messages[-1] == "Production run complete!"

    def test_nothing_to_complete(self, production):
        with pytest.raises(NoActiveRunError):
            asyncio.run(production.complete_run())


class TestRecentRuns:
    def test_requires_storage(self, production):
        with pytest.raises(PersistenceUnavailableError):
            asyncio.run(production.recent_runs())

    def test_newest_first(self, registry, notifier, clock):
        repository = FakeRunRepository()
        service = ProductionService(registry, notifier, run_repository=repository)
        for _ in range(2):
            start_dividing(service, [pandesal()])
            asyncio.run(service.complete_run())
            clock.advance(3600)

        runs = asyncio.run(service.recent_runs(limit=1))
        assert runs == [repository.saved[1]]
