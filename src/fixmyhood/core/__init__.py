"""Core configuration for FixMyHood."""
