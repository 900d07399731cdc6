"""Gatekeeper: role-based access control for an identity service."""
