"""
Tracking configuration schema.

Typed, frozen form of ``workflow.yaml``: the status graph, the hard-terminal
and tenant-gated statuses, and batch limits.  The loader parses YAML into
these types; ``bridges.build_status_workflow`` turns the workflow part into
the kernel's ``StatusWorkflow``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WorkflowDefinition:
    """Status graph as authored in YAML."""

    initial_status: str
    sequence: tuple[str, ...]
    transitions: tuple[tuple[str, tuple[str, ...]], ...]
    terminal_statuses: tuple[str, ...] = ()
    gated_statuses: tuple[tuple[str, tuple[str, ...]], ...] = ()

    def transitions_map(self) -> dict[str, tuple[str, ...]]:
        return dict(self.transitions)

    def gated_map(self) -> dict[str, tuple[str, ...]]:
        return dict(self.gated_statuses)


# ---------------------------------------------------------------------------
# Batch limits
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BatchSettings:
    chunk_size: int = 100
    max_bulk_updates: int = 100


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TrackingConfiguration:
    """Root configuration artifact."""

    config_id: str
    version: int
    workflow: WorkflowDefinition
    batch: BatchSettings = field(default_factory=BatchSettings)
    checksum: str = ""
