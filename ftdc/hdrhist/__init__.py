"""HDR histograms and windowed histograms for recording value distributions."""

__all__ = ["histogram", "window"]