"""Ingredient scaling, list consolidation and store reconciliation."""
