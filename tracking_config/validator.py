"""
Configuration Validator (``tracking_config.validator``).

Responsibility
--------------
Structural checks on a ``TrackingConfiguration`` before it is bridged into
the kernel.

Invariants enforced
-------------------
* The sequence has no duplicates and contains the initial status.
* Every sequence status has a transitions entry; every transition source
  and target is in the sequence.
* Hard-terminal statuses never appear in the graph.
* Gated statuses are in the sequence and name at least one company code.
* Batch limits are positive.

Failure modes
-------------
* Errors (``ConfigValidationResult.errors``)  -> configuration MUST NOT be
  used.
* Warnings  -> usable, but worth a look.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from tracking_config.schema import TrackingConfiguration


@dataclass
class ConfigValidationResult:
    """``is_valid`` is True only when ``errors`` is empty."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_configuration(config: TrackingConfiguration) -> ConfigValidationResult:
    result = ConfigValidationResult()

    _validate_sequence(config, result)
    _validate_transitions(config, result)
    _validate_terminal_statuses(config, result)
    _validate_gated_statuses(config, result)
    _validate_batch_settings(config, result)

    return result


def _validate_sequence(
    config: TrackingConfiguration, result: ConfigValidationResult
) -> None:
    workflow = config.workflow
    if not workflow.sequence:
        result.add_error("Workflow sequence is empty")
        return

    seen: set[str] = set()
    for status in workflow.sequence:
        if status in seen:
            result.add_error(f"Status '{status}' appears more than once in sequence")
        seen.add(status)

    if workflow.initial_status not in seen:
        result.add_error(
            f"Initial status '{workflow.initial_status}' is not in the sequence"
        )


def _validate_transitions(
    config: TrackingConfiguration, result: ConfigValidationResult
) -> None:
    workflow = config.workflow
    known = set(workflow.sequence)
    transitions = workflow.transitions_map()

    for status in workflow.sequence:
        if status not in transitions:
            result.add_error(f"Status '{status}' has no transitions entry")

    for source, targets in transitions.items():
        if source not in known:
            result.add_error(f"Transition source '{source}' is not in the sequence")
        for target in targets:
            if target not in known:
                result.add_error(
                    f"Transition target '{target}' (from '{source}') is not in the sequence"
                )
            elif target == source:
                result.add_warning(f"Status '{source}' transitions to itself")


def _validate_terminal_statuses(
    config: TrackingConfiguration, result: ConfigValidationResult
) -> None:
    workflow = config.workflow
    in_graph = set(workflow.sequence)
    for targets in workflow.transitions_map().values():
        in_graph.update(targets)

    for status in workflow.terminal_statuses:
        if status in in_graph:
            result.add_error(
                f"Terminal status '{status}' must not be part of the workflow graph"
            )


def _validate_gated_statuses(
    config: TrackingConfiguration, result: ConfigValidationResult
) -> None:
    workflow = config.workflow
    known = set(workflow.sequence)
    for status, companies in workflow.gated_map().items():
        if status not in known:
            result.add_error(f"Gated status '{status}' is not in the sequence")
        if not companies:
            result.add_error(f"Gated status '{status}' lists no company codes")


def _validate_batch_settings(
    config: TrackingConfiguration, result: ConfigValidationResult
) -> None:
    if config.batch.chunk_size < 1:
        result.add_error(
            f"batch.chunk_size must be positive, got {config.batch.chunk_size}"
        )
    if config.batch.max_bulk_updates < 1:
        result.add_error(
            "batch.max_bulk_updates must be positive, "
            f"got {config.batch.max_bulk_updates}"
        )
