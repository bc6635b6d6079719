"""
Currency normalization into the platform reporting currency.

Pure conversion against a configured rate table. No I/O, no rounding
beyond what Decimal arithmetic does on its own.
"""

from collections.abc import Mapping
from decimal import Decimal


class UnknownCurrencyError(ValueError):
    """Raised when an amount is in a currency with no known rate."""

    def __init__(self, currency: str) -> None:
        super().__init__(f"Unknown currency: {currency!r}")
        self.currency = currency


def normalize_code(currency: str) -> str:
    """Upper-case and validate a 3-letter currency code."""
    code = (currency or "").strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise UnknownCurrencyError(currency)
    return code


class CurrencyNormalizer:
    """
    Converts amounts into a single reporting currency.

    Rates are expressed as units of the reporting currency per one unit
    of the source currency, e.g. {"USD": Decimal("1500")} when reporting
    in NGN. The reporting currency itself always converts at 1.

    Example:
        normalizer = CurrencyNormalizer("NGN", {"USD": Decimal("1500")})
        normalizer.convert(Decimal("1000"), "USD")  # Decimal("1500000")
    """

    def __init__(
        self,
        reporting_currency: str,
        rates: Mapping[str, Decimal] | None = None,
    ) -> None:
        self.reporting_currency = normalize_code(reporting_currency)
        self._rates: dict[str, Decimal] = {}
        for code, rate in (rates or {}).items():
            rate = Decimal(str(rate))
            if rate <= 0:
                raise ValueError(f"Exchange rate for {code} must be positive, got {rate}")
            self._rates[normalize_code(code)] = rate
        self._rates[self.reporting_currency] = Decimal(1)

    @property
    def currencies(self) -> frozenset[str]:
        """Currency codes this normalizer can convert."""
        return frozenset(self._rates)

    def rate_for(self, currency: str) -> Decimal:
        """Look up the conversion rate for a currency code."""
        code = normalize_code(currency)
        try:
            return self._rates[code]
        except KeyError:
            raise UnknownCurrencyError(currency) from None

    def convert(self, amount: Decimal, source_currency: str) -> Decimal:
        """
        Convert an amount into the reporting currency.

        Args:
            amount: Non-negative amount in the source currency
            source_currency: 3-letter code of the amount's currency

        Returns:
            Amount in the reporting currency

        Raises:
            UnknownCurrencyError: If the currency has no configured rate
            ValueError: If the amount is negative
        """
        if not isinstance(amount, Decimal):
            amount = Decimal(str(amount))
        if amount < 0:
            raise ValueError(f"Amount must be non-negative, got {amount}")
        return amount * self.rate_for(source_currency)

    def convert_totals(self, totals: Mapping[str, Decimal]) -> Decimal:
        """Sum a {currency: amount} map into the reporting currency."""
        return sum(
            (self.convert(amount, currency) for currency, amount in totals.items()),
            Decimal(0),
        )
