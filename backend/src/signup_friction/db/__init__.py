"""Signup record model and store."""
