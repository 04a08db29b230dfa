"""Shared utilities: structured error logging and atomic file writes."""
