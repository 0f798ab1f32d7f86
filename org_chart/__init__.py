"""Hierarchy graph engine for an editable organization chart."""
