"""Per product line feature toggles (Mothership vs. Speedboat parameterization)."""

__all__ = [
    "models",
    "schemas",
    "repository",
    "service",
    "router",
    "bootstrap",
]
