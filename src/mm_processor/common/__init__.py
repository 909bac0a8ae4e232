"""Shared transport, metrics and utility modules."""
