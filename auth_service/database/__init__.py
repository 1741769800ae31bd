"""User store implementations."""
