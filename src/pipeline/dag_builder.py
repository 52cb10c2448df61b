# src/pipeline/dag_builder.py — v1
"""DAG builder — build execution levels from stage dependencies.

Produces a levelled execution plan. Detects cycles and validates that
all dependencies are resolvable. Within a level, stages keep their
declaration order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class DAGError(Exception):
    """Raised when DAG construction fails (cycle, missing dep)."""


@dataclass
class ExecutionPlan:
    """Ordered execution plan for pipeline stages.

    levels is a list of stage groups: stages within the same level have
    no mutual dependencies and may run concurrently. Levels execute
    sequentially.
    """

    levels: list[list[str]] = field(default_factory=list)
    total_stages: int = 0

    @property
    def flat_order(self) -> list[str]:
        """Return a flat ordering (no concurrency info)."""
        return [stage for level in self.levels for stage in level]


def build_dag(dependency_map: dict[str, list[str]]) -> ExecutionPlan:
    """Build an execution DAG from stage dependency declarations.

    Uses Kahn's algorithm with level detection. Each level contains
    stages whose dependencies are fully resolved by previous levels.

    Args:
        dependency_map: stage_name -> list of dependency stage names, in
            declaration order.

    Returns:
        ExecutionPlan with levelled execution order.

    Raises:
        DAGError: If a cycle is detected or a dependency is missing.
    """
    if not dependency_map:
        return ExecutionPlan()

    order = {name: i for i, name in enumerate(dependency_map)}
    for stage, deps in dependency_map.items():
        for dep in deps:
            if dep not in order:
                raise DAGError(
                    f"Stage '{stage}' depends on '{dep}' which is not declared"
                )

    in_degree: dict[str, int] = {s: 0 for s in dependency_map}
    dependents: dict[str, list[str]] = {s: [] for s in dependency_map}
    for stage, deps in dependency_map.items():
        for dep in set(deps):
            dependents[dep].append(stage)
            in_degree[stage] += 1

    levels: list[list[str]] = []
    queue = [s for s, d in in_degree.items() if d == 0]
    processed = 0

    while queue:
        # All stages in current queue have in_degree 0 → same level
        levels.append(queue)
        next_queue: list[str] = []
        for stage in queue:
            processed += 1
            for dependent in dependents[stage]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    next_queue.append(dependent)
        queue = sorted(next_queue, key=order.__getitem__)

    if processed != len(dependency_map):
        remaining = [s for s in dependency_map if in_degree[s] > 0]
        raise DAGError(f"Cycle detected involving stages: {remaining}")

    plan = ExecutionPlan(levels=levels, total_stages=processed)
    logger.debug(
        "DAG built: %d stages in %d levels → %s",
        plan.total_stages,
        len(plan.levels),
        plan.levels,
    )
    return plan
