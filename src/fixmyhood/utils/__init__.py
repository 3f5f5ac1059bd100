"""Pure helper functions shared across services."""
