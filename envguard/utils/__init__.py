"""Shared utilities for envguard."""
