"""Iteration lineage registry — every rewrite attempt, keyed by id."""

import threading

from objproof.errors import BrokenLineageError
from objproof.models import Iteration


class IterationStore:
    """In-memory registry of iterations forming a forest of lineages.

    Nothing is evicted; ``clear`` is the only way to remove entries.
    """

    def __init__(self):
        self._iterations: dict[str, Iteration] = {}
        self._lock = threading.Lock()

    def __contains__(self, iteration_id: str) -> bool:
        return iteration_id in self._iterations

    def __len__(self) -> int:
        return len(self._iterations)

    def create(
        self,
        input_text: str,
        parent_id: str | None = None,
        target_word_count: int | None = None,
        custom_instructions: str | None = None,
    ) -> Iteration:
        """Create and register a ``processing`` iteration.

        The version is the registered parent's version + 1, or 1 when there
        is no parent or the parent is not registered. Callers decide whether
        an unregistered parent is an error.
        """
        with self._lock:
            parent = self._iterations.get(parent_id) if parent_id else None
            iteration = Iteration(
                input_text=input_text,
                parent_id=parent_id,
                version=parent.version + 1 if parent else 1,
                target_word_count=target_word_count,
                custom_instructions=custom_instructions,
            )
            self._iterations[iteration.id] = iteration
        return iteration

    def get(self, iteration_id: str) -> Iteration | None:
        return self._iterations.get(iteration_id)

    def history(self, iteration_id: str) -> list[Iteration]:
        """Return the lineage of ``iteration_id``, root first.

        An unknown ``iteration_id`` yields an empty list. A parent id that
        is not registered, or a chain that revisits an id, raises
        BrokenLineageError.
        """
        current = self._iterations.get(iteration_id)
        if current is None:
            return []

        chain = []
        seen = set()
        while True:
            if current.id in seen:
                raise BrokenLineageError(
                    f"Lineage of {iteration_id} loops back to {current.id}."
                )
            seen.add(current.id)
            chain.append(current)

            if current.parent_id is None:
                break
            parent = self._iterations.get(current.parent_id)
            if parent is None:
                raise BrokenLineageError(
                    f"Iteration {current.id} references missing parent {current.parent_id}."
                )
            current = parent

        chain.reverse()
        return chain

    def clear(self) -> None:
        with self._lock:
            self._iterations.clear()
