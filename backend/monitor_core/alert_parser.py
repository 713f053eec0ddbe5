"""Validation of user-supplied alert parameters.

Malformed requests are rejected here so they never reach the evaluator.
"""

import math

from monitor_core.instruments import InvalidInstrumentError, normalize_instrument
from monitor_core.models import AlertCondition, PriceAlert


class InvalidAlertError(ValueError):
    """Raised for a malformed alert request."""


def build_alert(instrument: str, condition: str, target_price: float) -> PriceAlert:
    """Create a PriceAlert from loose parameters.

    Raises:
        InvalidAlertError: If any parameter is invalid
    """
    try:
        symbol = normalize_instrument(instrument)
    except InvalidInstrumentError as e:
        raise InvalidAlertError(str(e)) from e

    try:
        cond = AlertCondition(condition.strip())
    except ValueError:
        raise InvalidAlertError(f"Invalid condition '{condition}', expected '>' or '<'")

    if not math.isfinite(target_price) or target_price <= 0:
        raise InvalidAlertError(f"Target price must be a positive number, got {target_price}")

    return PriceAlert(instrument=symbol, condition=cond, target_price=target_price)


def parse_alert(text: str) -> PriceAlert:
    """Parse ``"<INSTRUMENT> <'>'|'<'> <price>"``, e.g. ``BTC-USDT > 50000``."""
    parts = text.split()
    if len(parts) != 3:
        raise InvalidAlertError(
            f"Expected '<INSTRUMENT> <condition> <price>', got '{text.strip()}'"
        )

    instrument, condition, price_str = parts
    try:
        price = float(price_str)
    except ValueError:
        raise InvalidAlertError(f"Invalid price '{price_str}'")

    return build_alert(instrument, condition, price)
