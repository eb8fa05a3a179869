"""Good To Go readiness per product line."""
