"""HTTP middleware and routing for configuration-management services."""

__version__ = "1.0.0"