"""
Workforce utilization event.

Runs after the host assigned workers: lowers maximum staffing of
under-utilized workplaces and charges accrued maintenance.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from marketeconomy.core.decorators import event

if TYPE_CHECKING:
    from marketeconomy.engine import Engine


@event
class EnforceWorkforceUtilization:
    """
    Enforce the utilization floor and collect maintenance fees.

    Rule
    ----
        u = staffed / max(1, C)
        u < share  ->  max_workers = min(max_workers, ceil(share · C))
        acc += (base + per_capacity · C) · (penalty if u < share else 1) / ticks_per_day
        due  ->  transfer(-floor(acc)),  acc -= floor(acc),  debt += floor(acc)

    C: Capacity (explicit or from lot data)
    """

    flag = "utilization"

    def execute(self, engine: Engine) -> None:
        from marketeconomy.errors import MissingDependencyError
        from marketeconomy.resources import Resource
        from marketeconomy.systems.workforce import (
            accrue_maintenance,
            enforce_utilization,
            maintenance_due,
            settle_maintenance,
        )

        logger = self.get_logger()
        views = engine.gateway.workplaces()
        if views is None:
            return

        cfg = engine.config
        tracker = engine.workplaces
        clamped = charged = 0

        for view in views:
            result = enforce_utilization(view, cfg)
            if result is None:
                continue

            state = tracker.get(view.entity)
            state.staffed_count = view.staffed
            state.under_utilized = result.under_utilized

            state.max_workers = view.max_workers
            if result.max_workers < view.max_workers:
                try:
                    engine.gateway.set_max_workers(view.entity, result.max_workers)
                except MissingDependencyError as exc:
                    logger.warning(f"Staffing clamp for {view.entity} skipped: {exc}")
                else:
                    state.max_workers = result.max_workers
                    clamped += 1

            accrue_maintenance(state, result.capacity, result.under_utilized, cfg)
            due = maintenance_due(state, cfg)
            deducted = 0
            if due > 0:
                try:
                    engine.gateway.transfer(view.entity, Resource.MONEY, -due)
                except MissingDependencyError as exc:
                    logger.warning(f"Maintenance fee for {view.entity} deferred: {exc}")
                else:
                    settle_maintenance(state, due)
                    deducted = due
                    charged += 1

            engine.trace.record(
                engine.tick,
                "workforce",
                view.entity,
                capacity=result.capacity,
                staffed=view.staffed,
                utilization=result.utilization,
                max_workers=state.max_workers,
                accumulated=state.accumulated_maintenance,
                deducted=deducted,
                debt=state.maintenance_debt,
            )

        pruned = tracker.prune(view.entity for view in views)
        logger.debug(
            f"Workplaces: seen={len(views)}, clamped={clamped}, "
            f"charged={charged}, pruned={pruned}"
        )
