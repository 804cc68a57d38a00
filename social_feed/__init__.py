"""Multi-source social feed aggregator."""

__version__ = "0.1.0"
