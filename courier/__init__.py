"""Courier: direct-messaging backend."""
