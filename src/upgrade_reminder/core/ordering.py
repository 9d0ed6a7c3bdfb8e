"""Default list ordering - earliest finish first, ties kept in insertion order."""

from .tasks import Task


def sort_by_finish(tasks: list[Task]) -> list[Task]:
    """Stable ascending sort by finish."""
    return sorted(tasks, key=lambda t: t.finish)


def insert_by_finish(tasks: list[Task], item: Task) -> int:
    """
    Insert `item` into a finish-sorted list, after any equal finishes.

    Mutates `tasks` in place and returns the index used.
    """
    i = 0
    while i < len(tasks) and tasks[i].finish <= item.finish:
        i += 1
    tasks.insert(i, item)
    return i
