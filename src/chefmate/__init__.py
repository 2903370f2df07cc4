"""
ChefMate recipe and shopping-list package.

The package scales recipes to a serving count, consolidates the resulting
ingredients into a shopping list and keeps that list in sync with a persisted
store.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
