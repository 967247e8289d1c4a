"""Histograms combined over a rotating window of sections."""

from __future__ import annotations

from ftdc.hdrhist.histogram import Histogram


class WindowedHistogram:
    """A ring of histograms; ``current`` receives new values."""

    def __init__(self, n: int, min_value: int, max_value: int, sigfigs: int) -> None:
        if n < 1:
            raise ValueError("a windowed histogram needs at least one section")
        self._idx = -1
        self._sections = [Histogram(min_value, max_value, sigfigs) for _ in range(n)]
        self._merged = Histogram(min_value, max_value, sigfigs)
        self.current: Histogram = self._sections[0]
        self.rotate()

    def merge(self) -> Histogram:
        """A histogram with the values of every section of the window."""
        self._merged.reset()
        for section in self._sections:
            self._merged.merge(section)
        return self._merged

    def rotate(self) -> None:
        """Reset the oldest section and make it the current one."""
        self._idx += 1
        self.current = self._sections[self._idx % len(self._sections)]
        self.current.reset()