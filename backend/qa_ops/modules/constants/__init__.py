"""Read-only constants shared with the dashboard."""
