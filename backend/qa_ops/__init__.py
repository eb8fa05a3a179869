"""QA operations API: Jenkins metrics, branch recreation and GTG readiness."""

__version__ = "0.1.0"
