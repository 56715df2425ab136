"""Shared utilities (logging) for Modguard."""
