"""Integrations with the directory service, credentials and sessions."""
