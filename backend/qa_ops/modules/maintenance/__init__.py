"""Schema sync and bootstrap re-runs for administrators."""
