from __future__ import annotations

from abc import ABC, abstractmethod

from structlog import get_logger

from weakcoll.core.policy import CleanPolicy

logger = get_logger()


class WeakContainer(ABC):
    """Add counting and sweeping shared by every weak container.

    Stale entries are never removed behind the caller's back: they go away
    during ``clean()``, which runs either explicitly or once
    ``auto_clean_threshold`` adds have happened since the previous clean, or
    as a side effect of scans that are allowed to drop what they walk past.
    """

    policy: CleanPolicy

    def __init__(self, policy: CleanPolicy) -> None:
        self.policy = policy
        self._add_count_since_last_clean = 0
        self._clean_generation = 0

    @property
    def add_count_since_last_clean(self) -> int:
        return self._add_count_since_last_clean

    @property
    def auto_clean_threshold(self) -> int | None:
        return self.policy.auto_clean_threshold

    @auto_clean_threshold.setter
    def auto_clean_threshold(self, value: int | None) -> None:
        self.policy.auto_clean_threshold = value

    @property
    def trim_excess_during_clean(self) -> bool:
        return self.policy.trim_excess_during_clean

    @trim_excess_during_clean.setter
    def trim_excess_during_clean(self, value: bool) -> None:
        self.policy.trim_excess_during_clean = value

    @abstractmethod
    def _sweep(self) -> int:
        """Remove every stale entry and return how many were removed."""

    @abstractmethod
    def _clear_entries(self) -> None: ...

    @abstractmethod
    def _entry_count(self) -> int: ...

    @abstractmethod
    def trim_excess(self) -> None: ...

    @property
    @abstractmethod
    def capacity(self) -> int: ...

    def _on_added(self) -> None:
        self._add_count_since_last_clean += 1
        threshold = self.policy.auto_clean_threshold
        if threshold is not None and self._add_count_since_last_clean >= threshold:
            logger.debug(
                f"{type(self).__name__}.auto_clean",
                threshold=threshold,
                entries=self._entry_count(),
            )
            self.clean()

    def clean(self) -> None:
        """Remove entries for reclaimed values, trimming if configured."""
        removed = self._sweep()
        if self.policy.trim_excess_during_clean:
            self.trim_excess()
        self._add_count_since_last_clean = 0
        self._clean_generation += 1
        logger.debug(
            f"{type(self).__name__}.clean",
            removed=removed,
            remaining=self._entry_count(),
            capacity=self.capacity,
        )

    def clear(self) -> None:
        """Remove every entry. Capacity is left as it is."""
        self._clear_entries()
        self._add_count_since_last_clean = 0
        self._clean_generation += 1

    def _walk_marker(self) -> tuple[int, int]:
        return self._clean_generation, self._add_count_since_last_clean

    def _finish_sweeping_walk(self, marker: tuple[int, int], dropped: int) -> None:
        # A walk that visited every entry and dropped every stale one is as
        # good as a clean; adds made while it ran are still outstanding.
        generation, adds_before = marker
        if generation == self._clean_generation:
            self._add_count_since_last_clean -= adds_before
            # Walks still open started before this point and must not
            # subtract the same adds again.
            self._clean_generation += 1
        if dropped:
            logger.debug(
                f"{type(self).__name__}.sweep_on_enumerate",
                dropped=dropped,
                remaining=self._entry_count(),
            )
