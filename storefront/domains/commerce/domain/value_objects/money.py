"""
Money Value Object for Commerce Domain

Fixed-point monetary arithmetic and storefront price formatting.

Arithmetic keeps full decimal precision; rounding happens only through
``round_to_scale`` (banker's rounding, half to even) or when formatting.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal

from storefront.core.domain import StatusEnum, ValueObject, to_decimal

HUNDRED = Decimal("100")
ZERO = Decimal("0")

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CNY": "¥",
    "INR": "₹",
    "AUD": "A$",
    "CAD": "C$",
    "NZD": "NZ$",
    "MXN": "MX$",
    "BRL": "R$",
    "ARS": "ARS$",
    "KRW": "₩",
    "CHF": "CHF",
    "SEK": "kr",
}
DEFAULT_SYMBOL = "$"

PRICE_RANGE_SEPARATOR = " – "


def currency_symbol(currency: str) -> str:
    """Symbol for an ISO-4217 code, ``$`` when the code is unknown."""
    return CURRENCY_SYMBOLS.get(currency.upper(), DEFAULT_SYMBOL)


def round_amount(value: Decimal, scale: int) -> Decimal:
    """Round half to even at ``scale`` decimal places."""
    return value.quantize(Decimal(1).scaleb(-scale), rounding=ROUND_HALF_EVEN)


class SymbolPosition(StatusEnum):
    """Where the currency symbol goes relative to the number."""

    LEFT = "left"
    RIGHT = "right"
    LEFT_SPACE = "left_space"
    RIGHT_SPACE = "right_space"


@dataclass(frozen=True)
class FormattingProfile(ValueObject):
    """
    Display and rounding profile of a store.

    ``number_of_decimals`` is also the scale every tax and discount is rounded to.
    """

    currency: str = "USD"
    symbol_position: SymbolPosition = SymbolPosition.LEFT
    thousand_separator: str = ","
    decimal_separator: str = "."
    number_of_decimals: int = 2

    def _validate(self) -> None:
        if not self.currency or len(self.currency) != 3:
            raise ValueError("Currency must be a 3-letter ISO code")
        if not 0 <= self.number_of_decimals <= 4:
            raise ValueError("number_of_decimals must be between 0 and 4")
        if not isinstance(self.symbol_position, SymbolPosition):
            object.__setattr__(self, "symbol_position", SymbolPosition.from_string(str(self.symbol_position)))

    @property
    def symbol(self) -> str:
        return currency_symbol(self.currency)

    def round(self, value: Decimal) -> Decimal:
        """Round a raw amount to the profile scale."""
        return round_amount(value, self.number_of_decimals)

    def format_decimal(self, value: Decimal) -> str:
        """
        Render a number with grouping and decimal separators, no symbol.

        Example:
            ```python
            FormattingProfile().format_decimal(Decimal("1234.5"))  # "1,234.50"
            ```
        """
        rounded = self.round(value)
        sign = "-" if rounded < 0 else ""
        digits = f"{abs(rounded):f}"
        integer, _, fraction = digits.partition(".")

        groups = []
        while len(integer) > 3:
            groups.insert(0, integer[-3:])
            integer = integer[:-3]
        groups.insert(0, integer)
        text = self.thousand_separator.join(groups)

        if self.number_of_decimals > 0:
            text = f"{text}{self.decimal_separator}{fraction.ljust(self.number_of_decimals, '0')}"
        return f"{sign}{text}"

    def format_price(self, value: Decimal) -> str:
        """Render a price with the currency symbol in the configured position."""
        number = self.format_decimal(value)
        sign = ""
        if number.startswith("-"):
            sign, number = "-", number[1:]

        symbol = self.symbol
        match self.symbol_position:
            case SymbolPosition.LEFT:
                text = f"{symbol}{number}"
            case SymbolPosition.LEFT_SPACE:
                text = f"{symbol} {number}"
            case SymbolPosition.RIGHT:
                text = f"{number}{symbol}"
            case SymbolPosition.RIGHT_SPACE:
                text = f"{number} {symbol}"
        return f"{sign}{text}"

    def format_price_range(self, minimum: Decimal, maximum: Decimal) -> str:
        """Render ``min – max``, or a single price when both bounds round equal."""
        if self.round(minimum) == self.round(maximum):
            return self.format_price(minimum)
        return f"{self.format_price(minimum)}{PRICE_RANGE_SEPARATOR}{self.format_price(maximum)}"


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object for financial calculations.

    Represents an amount with currency and supports exact arithmetic.
    Negative amounts are allowed so that intermediate results (refund
    balances, discount differences) can be expressed; callers clamp where
    a rule requires it.

    Example:
        ```python
        price = Money(Decimal("19.99"), "USD")
        line = price.mul_by_int(3)                       # 59.97
        tax = line.mul_by_rate(Decimal("8.25")).round_to_scale(2)
        line.add(tax).format(FormattingProfile())        # "$64.92"
        ```
    """

    amount: Decimal
    currency: str = "USD"

    def _validate(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        if not self.currency or len(self.currency) != 3:
            raise ValueError("Currency must be a 3-letter ISO code")

    def _check_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise ValueError(f"Currency mismatch: {self.currency} vs {other.currency}")

    def add(self, other: "Money") -> "Money":
        """Add two Money values (must be same currency)."""
        self._check_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def sub(self, other: "Money") -> "Money":
        """Subtract Money (must be same currency)."""
        self._check_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def mul_by_int(self, factor: int) -> "Money":
        """Multiply by a whole quantity."""
        if isinstance(factor, bool) or not isinstance(factor, int):
            raise TypeError("Quantity factor must be an int")
        return Money(self.amount * factor, self.currency)

    def mul_by_rate(self, rate: Decimal | int | str) -> "Money":
        """Amount × rate / 100, unrounded."""
        return Money(self.amount * to_decimal(rate) / HUNDRED, self.currency)

    def round_to_scale(self, scale: int) -> "Money":
        """Banker's rounding to ``scale`` decimals."""
        return Money(round_amount(self.amount, scale), self.currency)

    def format(self, profile: FormattingProfile) -> str:
        return profile.format_price(self.amount)

    def convert(self, target_currency: str, exchange_rate: Decimal, markup: Decimal = ZERO, scale: int = 2) -> "Money":
        """
        Convert with the documented formula only.

        converted = amount × exchange_rate × (1 + markup / 100), rounded to ``scale``.
        """
        rate = to_decimal(exchange_rate) * (1 + to_decimal(markup) / HUNDRED)
        return Money(round_amount(self.amount * rate, scale), target_currency.upper())

    def is_zero(self) -> bool:
        return self.amount == ZERO

    def is_positive(self) -> bool:
        return self.amount > ZERO

    def __str__(self) -> str:
        return f"{self.currency} {self.amount}"

    @classmethod
    def zero(cls, currency: str = "USD") -> "Money":
        """Create a zero Money value."""
        return cls(ZERO, currency)
