"""Scheduled recreation of long-lived branches from their base branch."""
