"""
Config -> Kernel bridges.

Turn configuration artifacts into kernel and batch inputs.  These live in
tracking_config because the kernel must never import tracking_config.

Usage:
    from tracking_config import get_active_config
    from tracking_config.bridges import build_status_workflow

    config = get_active_config()
    validator = StatusTransitionValidator(lookups, build_status_workflow(config))
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from tracking_kernel.domain.clock import Clock
from tracking_kernel.domain.providers import AuthorizationProvider, TerritoryProvider
from tracking_kernel.domain.workflow import StatusWorkflow

from tracking_batch.services.bulk_update import BulkStatusUpdateCoordinator
from tracking_batch.services.period_initializer import PeriodInitializer
from tracking_batch.services.record_writer import BatchRecordWriter

from tracking_config.schema import TrackingConfiguration


def build_status_workflow(config: TrackingConfiguration) -> StatusWorkflow:
    workflow = config.workflow
    return StatusWorkflow(
        initial_status=workflow.initial_status,
        sequence=workflow.sequence,
        transitions=workflow.transitions_map(),
        terminal_statuses=frozenset(workflow.terminal_statuses),
        gated_statuses=workflow.gated_map(),
    )


def build_period_initializer(
    config: TrackingConfiguration,
    session: Session,
) -> PeriodInitializer:
    """PeriodInitializer using the configured workflow and chunk size."""
    return PeriodInitializer(
        session,
        writer=BatchRecordWriter(session, chunk_size=config.batch.chunk_size),
        workflow=build_status_workflow(config),
    )


def build_bulk_update_coordinator(
    config: TrackingConfiguration,
    session: Session,
    authorization: AuthorizationProvider,
    territory: TerritoryProvider,
    clock: Clock | None = None,
) -> BulkStatusUpdateCoordinator:
    """BulkStatusUpdateCoordinator bounded by ``batch.max_bulk_updates``."""
    return BulkStatusUpdateCoordinator(
        session,
        authorization,
        territory,
        workflow=build_status_workflow(config),
        clock=clock,
        max_updates=config.batch.max_bulk_updates,
    )
