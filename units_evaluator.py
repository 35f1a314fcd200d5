"""
SmartCalc Units Evaluator
Unit conversion through pint and currency conversion with optional live rates.
"""

import logging
import re
from typing import Optional

import pint
import requests

from calc_errors import DomainError
from config import Settings, load_settings
from constants import (
    FALLBACK_RATES, CURRENCY_ABBR, CURRENCY_DISPLAY,
    UNIT_ABBR, UNIT_DISPLAY,
)
from domain_evaluators import NOT_MINE, Claimed, DomainEvaluator
from result_formatter import format_result

logger = logging.getLogger(__name__)

ureg = pint.UnitRegistry()

# "20 dollars to euros", "$20 in eur", "5 miles to km"
CONVERSION_PATTERN = re.compile(r"^(\$)?([\d.,]+)\s*(.*?)\s+(?:to|in|as)\s+(.+?)$", re.IGNORECASE)


def _parse_conversion(expr):
    match = CONVERSION_PATTERN.match(expr.strip())
    if not match:
        return None
    dollar, amount, source, target = match.groups()
    source = source.strip().lower() or ("$" if dollar else "")
    if not source:
        return None
    try:
        value = float(amount.replace(",", ""))
    except ValueError:
        return None
    return value, source, target.strip().lower()


# =============================================================================
# EXCHANGE RATES
# =============================================================================

class ExchangeRates:
    """
    Currency rates relative to USD.

    Live lookups only happen when enabled in settings; any network or
    payload problem falls back to the static table.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or load_settings()

    def get_rate(self, from_currency: str, to_currency: str) -> Optional[float]:
        if from_currency == to_currency:
            return 1.0

        if self.settings.live_rates:
            live = self.fetch_live_rate(from_currency, to_currency)
            if live is not None:
                return live

        from_rate = FALLBACK_RATES.get(from_currency)
        to_rate = FALLBACK_RATES.get(to_currency)
        if from_rate is None or to_rate is None:
            return None
        return to_rate / from_rate

    def fetch_live_rate(self, from_currency, to_currency):
        params = {"base": from_currency.upper(), "symbols": to_currency.upper()}
        try:
            response = requests.get(self.settings.rates_url, params=params,
                                    timeout=self.settings.rates_timeout)
            response.raise_for_status()
            rates = response.json().get("rates", {})
            rate = rates.get(to_currency.upper())
            return float(rate) if rate is not None else None
        except (requests.RequestException, ValueError, AttributeError) as e:
            logger.warning("Live exchange rate lookup failed (%s -> %s): %s",
                           from_currency, to_currency, e)
            return None


# =============================================================================
# EVALUATOR
# =============================================================================

class UnitsEvaluator(DomainEvaluator):
    name = "units"

    def __init__(self, rates: Optional[ExchangeRates] = None):
        self.rates = rates or ExchangeRates()
        super().__init__((
            self.handle_currency_conversion,
            self.handle_unit_conversion,
        ))

    def looks_like_mine(self, expr: str) -> bool:
        parsed = _parse_conversion(expr)
        if parsed is None:
            return False
        _, source, target = parsed
        known = set(CURRENCY_ABBR) | set(UNIT_ABBR)
        return source in known or target in known

    def handle_currency_conversion(self, expr, expr_lower):
        """Handle currency conversion expressions like '20.40 dollars to euros'"""
        parsed = _parse_conversion(expr)
        if parsed is None:
            return NOT_MINE
        value, source, target = parsed
        from_code = CURRENCY_ABBR.get(source)
        to_code = CURRENCY_ABBR.get(target)
        if not from_code or not to_code:
            return NOT_MINE

        rate = self.rates.get_rate(from_code, to_code)
        if rate is None:
            raise DomainError(f"no exchange rate for {from_code} -> {to_code}")
        return Claimed(f"{value * rate:,.2f} {CURRENCY_DISPLAY.get(to_code, to_code.upper())}")

    def handle_unit_conversion(self, expr, expr_lower):
        """Handle unit conversion expressions like '5 feet to meters' using pint"""
        parsed = _parse_conversion(expr)
        if parsed is None:
            return NOT_MINE
        value, source, target = parsed
        if source not in UNIT_ABBR and target not in UNIT_ABBR:
            return NOT_MINE
        from_unit = UNIT_ABBR.get(source, source)
        to_unit = UNIT_ABBR.get(target, target)

        try:
            converted = ureg.Quantity(value, from_unit).to(to_unit).magnitude
        except (pint.errors.PintError, ValueError, TypeError) as e:
            raise DomainError(f"cannot convert {source} to {target}: {e}") from None

        display = UNIT_DISPLAY.get(to_unit, target)
        return Claimed(f"{format_result(round(converted, 4), False)} {display}")
