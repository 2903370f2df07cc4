"""Display formatting for ingredient quantities."""

from __future__ import annotations


def format_quantity(value: float) -> str:
    """Render a quantity for display.

    Whole numbers are shown without a decimal point. Anything else is shown
    with two decimals, and only an exact ``.00`` suffix is collapsed, so
    ``1.5`` renders as ``"1.50"`` while ``2.004`` renders as ``"2"``.
    """

    number = float(value)
    if number.is_integer():
        return str(int(number))
    rendered = f"{number:.2f}"
    if rendered.endswith(".00"):
        return rendered[:-3]
    return rendered


__all__ = ["format_quantity"]
