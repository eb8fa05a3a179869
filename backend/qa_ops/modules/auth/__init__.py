"""Token issuance for registered users."""
