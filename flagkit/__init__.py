"""Feature flag evaluation over OFREP, with Statsig and Unleash context helpers."""

__version__ = "0.1.0"