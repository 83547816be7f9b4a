"""Bucketed multi-tenant key-value store served over HTTP."""
