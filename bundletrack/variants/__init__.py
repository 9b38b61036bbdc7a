"""Variant catalogue lookups."""
