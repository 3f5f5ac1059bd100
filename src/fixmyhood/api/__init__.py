"""HTTP API for FixMyHood."""
