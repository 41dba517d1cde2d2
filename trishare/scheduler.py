"""Dependency-driven task scheduler with rounds and closures."""

from __future__ import annotations

import enum
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field

from trishare.checks import ProtocolError, check


class TaskType(enum.Enum):
    """Kind of a scheduled task."""

    ROUND = "round"
    CONTINUATION = "continuation"


@dataclass(frozen=True)
class Task:
    """Handle to a task owned by a scheduler."""

    task_idx: int
    scheduler: "Scheduler" = field(repr=False, compare=False)


@dataclass
class TaskBase:
    """Bookkeeping record of one task and its edges."""

    task_type: TaskType
    idx: int = -1
    upstream: list[int] = field(default_factory=list)
    downstream: list[int] = field(default_factory=list)
    closures: list[int] = field(default_factory=list)

    def add_downstream(self, idx: int) -> None:
        if idx not in self.downstream:
            self.downstream.append(idx)

    def add_upstream(self, idx: int) -> None:
        if idx not in self.upstream:
            self.upstream.append(idx)

    def remove_upstream(self, idx: int) -> None:
        try:
            pos = self.upstream.index(idx)
        except ValueError:
            raise ProtocolError(f"task {idx} is not upstream of task {self.idx}") from None
        self.upstream[pos] = self.upstream[-1]
        self.upstream.pop()

    def add_closure(self, idx: int) -> None:
        if idx not in self.closures:
            self.closures.append(idx)


def _as_deps(deps: Task | Iterable[Task]) -> list[Task]:
    if isinstance(deps, Task):
        return [deps]
    return list(deps)


class Scheduler:
    """Orders tasks so that each runs only after its dependencies are done."""

    def __init__(self) -> None:
        self.task_idx = 0
        self.tasks: dict[int, TaskBase] = {}
        self.ready: deque[int] = deque()
        self.next_round: deque[int] = deque()

    def _check_ready_candidate(self, idx: int) -> None:
        check(idx <= self.task_idx, f"task index {idx} was never issued")
        task = self.tasks.get(idx)
        check(task is not None, f"unknown task {idx}")
        check(not task.upstream, f"task {idx} still has dependencies")

    def add_ready(self, idx: int) -> None:
        self._check_ready_candidate(idx)
        self.ready.append(idx)

    def add_next_round(self, idx: int) -> None:
        self._check_ready_candidate(idx)
        self.next_round.append(idx)

    def _validate_deps(self, deps: list[Task], idx: int) -> None:
        for dep in deps:
            check(dep.scheduler is self, "dependency belongs to another scheduler")
            check(dep.task_idx == -1 or dep.task_idx < idx, "this task index is invalid")

    def add_task(self, task_type: TaskType, deps: Task | Iterable[Task] = ()) -> Task:
        """Add a task that runs after ``deps``; it is queued at once if none are pending."""
        deps = _as_deps(deps)
        idx = self.task_idx
        self._validate_deps(deps, idx)
        self.task_idx += 1
        record = TaskBase(task_type, idx)
        self.tasks[idx] = record
        for dep in deps:
            upstream = self.tasks.get(dep.task_idx)
            if upstream is not None:
                upstream.add_downstream(idx)
                record.add_upstream(dep.task_idx)
        if not record.upstream:
            self.add_ready(idx)
        return Task(idx, self)

    def add_closure(self, deps: Task | Iterable[Task]) -> Task:
        """Add a continuation that completes once ``deps`` and their successors finish."""
        deps = _as_deps(deps)
        idx = self.task_idx
        self._validate_deps(deps, idx)
        self.task_idx += 1
        record = TaskBase(TaskType.CONTINUATION, idx)
        for dep in deps:
            upstream = self.tasks.get(dep.task_idx)
            if upstream is not None:
                upstream.add_closure(idx)
                record.add_upstream(dep.task_idx)
        if record.upstream:
            self.tasks[idx] = record
        return Task(idx, self)

    def current_task(self) -> Task:
        if not self.ready:
            self.ready, self.next_round = self.next_round, self.ready
        check(bool(self.ready), "no task is ready")
        return Task(self.ready[0], self)

    def pop_task(self) -> None:
        check(bool(self.ready), "no task is ready")
        self.remove_task(self.ready[0])
        self.ready.popleft()

    def remove_task(self, idx: int) -> None:
        task = self.tasks.get(idx)
        check(task is not None, f"unknown task {idx}")
        check(not task.upstream, f"task {idx} still has dependencies")

        for d in task.downstream:
            ds = self.tasks.get(d)
            check(ds is not None, f"unknown downstream task {d}")
            ds.remove_upstream(idx)
            if not ds.upstream:
                if ds.task_type is TaskType.ROUND:
                    self.add_next_round(d)
                else:
                    self.add_ready(d)
            for c in task.closures:
                closure = self.tasks.get(c)
                check(closure is not None, f"unknown closure {c}")
                ds.add_closure(c)
                closure.add_upstream(d)

        for c in task.closures:
            closure = self.tasks[c]
            closure.remove_upstream(idx)
            if not closure.upstream:
                self.remove_task(c)

        del self.tasks[idx]

    def null_task(self) -> Task:
        return Task(-1, self)

    def describe(self) -> str:
        """Return a human-readable dump of the ready queue and all tasks."""
        lines = ["=================================\nready:"]
        queue = self.ready if self.ready else self.next_round
        lines.extend(f" {r}" for r in queue)
        lines.append("\n---------------------------------\n")
        for record in self.tasks.values():
            lines.append(f"{record.idx}\n\tup:")
            lines.extend(f" {u}" for u in record.upstream)
            lines.append("\n\tdw:")
            lines.extend(f" {u}" for u in record.downstream)
            lines.append("\n\tcl:")
            lines.extend(f" {u}" for u in record.closures)
            lines.append("\n")
        return "".join(lines)