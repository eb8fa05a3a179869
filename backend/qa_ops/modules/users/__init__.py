"""User accounts and role assignment."""
