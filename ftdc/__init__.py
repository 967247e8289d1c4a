"""Metric encoding helpers, sample metric documents, error collection and HDR histograms."""

__version__ = "0.1.0"