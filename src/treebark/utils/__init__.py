"""Utility modules for Treebark."""
