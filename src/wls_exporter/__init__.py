"""wls-exporter: republish WebLogic REST management MBeans as Prometheus metrics."""

__version__ = "0.1.0"
