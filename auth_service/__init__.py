"""Credential-based authentication service: password verification and token lifecycle."""

__version__ = "1.0.0"
