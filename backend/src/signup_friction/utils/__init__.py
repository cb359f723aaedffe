"""Utility modules for the signup friction services."""
