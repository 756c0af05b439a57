"""Shared helpers: configuration-free utilities used across packages."""
