"""
StatusWorkflow -- immutable status graph for the follow-up process.

Responsibility:
    Holds the allowed transition graph, the ordinal sequence, the
    hard-terminal status codes and the tenant-gated statuses.  The
    validator receives a workflow by injection; nothing in the kernel reads
    the graph from module state.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  ``tracking_config.bridges`` builds
    instances from YAML; ``StatusWorkflow.standard()`` is the built-in graph.

Invariants enforced:
    - All collections are frozen (tuples / frozensets / MappingProxyType).
    - A status absent from ``transitions`` has no outgoing edges.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

PENDING = "PENDING"
TO_FOLLOW = "TO_FOLLOW"
CALLED = "CALLED"
VISITED = "VISITED"
UPDATED = "UPDATED"
DONE = "DONE"

DECEASED = "Deceased"
FULLY_PAID = "Fully-Paid"

FCASH_COMPANY_CODE = "FCASH"


@dataclass(frozen=True)
class StatusWorkflow:
    """Immutable status graph.

    Attributes:
        initial_status: Code new period records start in.
        sequence: Workflow statuses in forward order; drives the backward
            check.
        transitions: status code -> allowed target codes.
        terminal_statuses: Hard-terminal codes entered outside this workflow.
        gated_statuses: status code -> company codes allowed to use it.
    """

    initial_status: str
    sequence: tuple[str, ...]
    transitions: Mapping[str, frozenset[str]]
    terminal_statuses: frozenset[str] = frozenset()
    gated_statuses: Mapping[str, frozenset[str]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "sequence", tuple(self.sequence))
        object.__setattr__(
            self,
            "transitions",
            MappingProxyType(
                {k: frozenset(v) for k, v in self.transitions.items()}
            ),
        )
        object.__setattr__(
            self, "terminal_statuses", frozenset(self.terminal_statuses)
        )
        object.__setattr__(
            self,
            "gated_statuses",
            MappingProxyType(
                {k: frozenset(v) for k, v in self.gated_statuses.items()}
            ),
        )

    @classmethod
    def standard(cls) -> StatusWorkflow:
        """The built-in collections follow-up workflow."""
        return cls(
            initial_status=PENDING,
            sequence=(PENDING, TO_FOLLOW, CALLED, VISITED, UPDATED, DONE),
            transitions={
                PENDING: {TO_FOLLOW},
                TO_FOLLOW: {CALLED},
                CALLED: {VISITED, UPDATED},
                VISITED: {UPDATED},
                UPDATED: {DONE},
                DONE: set(),
            },
            terminal_statuses={DECEASED, FULLY_PAID},
            gated_statuses={VISITED: {FCASH_COMPANY_CODE}},
        )

    def allowed_targets(self, from_code: str) -> frozenset[str]:
        return self.transitions.get(from_code, frozenset())

    def is_edge(self, from_code: str, to_code: str) -> bool:
        return to_code in self.allowed_targets(from_code)

    def is_hard_terminal(self, code: str) -> bool:
        return code in self.terminal_statuses

    def is_gated(self, code: str) -> bool:
        return code in self.gated_statuses

    def allows_company(self, status_code: str, company_code: str | None) -> bool:
        """True when ``status_code`` is ungated or the company may use it."""
        if status_code not in self.gated_statuses:
            return True
        return company_code is not None and (
            company_code in self.gated_statuses[status_code]
        )

    def ordinal(self, code: str) -> int | None:
        """Position of ``code`` in the forward sequence, None if absent."""
        try:
            return self.sequence.index(code)
        except ValueError:
            return None

    def is_backward(self, from_code: str, to_code: str) -> bool:
        from_ordinal = self.ordinal(from_code)
        to_ordinal = self.ordinal(to_code)
        if from_ordinal is None or to_ordinal is None:
            return False
        return to_ordinal < from_ordinal

    def is_final(self, code: str) -> bool:
        """No outgoing edges: workflow-terminal or hard-terminal."""
        return self.is_hard_terminal(code) or not self.allowed_targets(code)
