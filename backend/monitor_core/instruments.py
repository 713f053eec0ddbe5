"""Instrument id validation shared by alerts, analysis and tracking."""

import re

_INSTRUMENT_RE = re.compile(r"^[A-Z0-9]{1,20}-[A-Z0-9]{1,20}$")


class InvalidInstrumentError(ValueError):
    """Raised for an instrument id that is not ``BASE-QUOTE``."""


def normalize_instrument(instrument: str) -> str:
    """Upper-case and validate an instrument id such as ``BTC-USDT``."""
    value = instrument.strip().upper()
    if not _INSTRUMENT_RE.match(value):
        raise InvalidInstrumentError(
            f"Invalid instrument '{instrument}', expected BASE-QUOTE (e.g. BTC-USDT)"
        )
    return value
