"""
Batch accumulation of points between store writes.
"""

from influx_loader.core.models import Point


class BatchAccumulator:
    """
    Collects points up to a fixed capacity.

    Owned by a single ingestion driver; not safe for concurrent use.
    """

    def __init__(self, capacity: int):
        """
        Initialize accumulator.

        Args:
            capacity: Number of points that makes a batch full
        """
        if capacity < 1:
            raise ValueError(f"Batch capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._points: list[Point] = []

    def append(self, point: Point) -> None:
        self._points.append(point)

    def __len__(self) -> int:
        return len(self._points)

    def is_full(self) -> bool:
        return len(self._points) >= self.capacity

    def is_empty(self) -> bool:
        return not self._points

    @property
    def points(self) -> tuple[Point, ...]:
        """Read-only view of the current batch."""
        return tuple(self._points)

    def drain(self) -> list[Point]:
        """
        Hand over the current batch and start a new, empty one.

        Returns:
            The points accumulated so far, in append order
        """
        batch = self._points
        self._points = []
        return batch
