"""Service layer for FixMyHood."""
