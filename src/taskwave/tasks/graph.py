"""Dependency graph helpers: ready set, failure propagation, validation."""

from __future__ import annotations

import logging
from collections import Counter, deque
from typing import Dict, Iterable, List, Sequence, Set

import networkx as nx

from ..errors import GraphValidationError
from .base import TaskStatus, TaskStep

logger = logging.getLogger(__name__)


def index_tasks(tasks: Iterable[TaskStep]) -> Dict[str, TaskStep]:
    return {task.id: task for task in tasks}


def ready_tasks(tasks: Sequence[TaskStep]) -> List[TaskStep]:
    """Return pending tasks whose dependencies have all completed.

    Order follows the collection. A dependency id that is not part of the
    collection is never satisfied.
    """

    by_id = index_tasks(tasks)
    ready: List[TaskStep] = []
    for task in tasks:
        if task.status is not TaskStatus.PENDING:
            continue
        if all(
            dep in by_id and by_id[dep].status is TaskStatus.COMPLETED
            for dep in task.dependencies
        ):
            ready.append(task)
    return ready


def propagate_failure(failed_id: str, tasks: Sequence[TaskStep]) -> List[TaskStep]:
    """Fail every pending task that depends, directly or transitively, on ``failed_id``.

    Tasks that are running or already terminal are left alone. Returns the
    newly failed tasks in the order they were marked.
    """

    dependents: Dict[str, List[TaskStep]] = {}
    for task in tasks:
        for dep in task.dependencies:
            dependents.setdefault(dep, []).append(task)

    newly_failed: List[TaskStep] = []
    worklist = deque([failed_id])
    while worklist:
        current = worklist.popleft()
        for task in dependents.get(current, []):
            if task.status is not TaskStatus.PENDING:
                continue
            task.fail(f"Dependency {current} failed")
            logger.debug("Task %s failed because dependency %s failed", task.id, current)
            newly_failed.append(task)
            worklist.append(task.id)
    return newly_failed


def build_graph(tasks: Sequence[TaskStep]) -> nx.DiGraph:
    """Directed graph with an edge ``dependency -> dependent`` for known ids."""

    graph = nx.DiGraph()
    known: Set[str] = set()
    for task in tasks:
        graph.add_node(task.id, task=task)
        known.add(task.id)
    for task in tasks:
        for dep in task.dependencies:
            if dep in known:
                graph.add_edge(dep, task.id)
    return graph


def validate_graph(tasks: Sequence[TaskStep]) -> None:
    """Raise :class:`GraphValidationError` for duplicate ids, unknown dependencies or cycles."""

    counts = Counter(task.id for task in tasks)
    duplicates = sorted(task_id for task_id, count in counts.items() if count > 1)
    dangling = [
        (task.id, dep) for task in tasks for dep in task.dependencies if dep not in counts
    ]
    cycle: List[str] = []
    try:
        edges = nx.find_cycle(build_graph(tasks))
    except nx.NetworkXNoCycle:
        pass
    else:
        cycle = [source for source, _target in edges]
    if duplicates or dangling or cycle:
        raise GraphValidationError(duplicates=duplicates, dangling=dangling, cycle=cycle)


def plan_waves(tasks: Sequence[TaskStep]) -> List[List[str]]:
    """Predict the waves an all-successful run would dispatch.

    Tasks caught in a cycle or depending on unknown ids are left out, since
    they would never become ready.
    """

    graph = build_graph(tasks)
    blocked: Set[str] = set()
    known = set(graph.nodes)
    for task in tasks:
        if any(dep not in known for dep in task.dependencies):
            blocked.add(task.id)
    for component in nx.strongly_connected_components(graph):
        if len(component) > 1 or any(graph.has_edge(node, node) for node in component):
            blocked.update(component)
    for node in list(blocked):
        blocked.update(nx.descendants(graph, node))
    graph.remove_nodes_from(blocked)
    order = {task.id: position for position, task in enumerate(tasks)}
    return [
        sorted(generation, key=order.__getitem__)
        for generation in nx.topological_generations(graph)
    ]
