"""Shipping rates by governorate."""

DEFAULT_RATES = {
    "cairo": 50.0,
    "giza": 50.0,
    "alexandria": 70.0,
}
DEFAULT_FALLBACK_RATE = 100.0


class ShippingRateTable:
    def __init__(self, rates: dict[str, float] | None = None, fallback: float = DEFAULT_FALLBACK_RATE) -> None:
        source = DEFAULT_RATES if rates is None else rates
        self._rates = {name.strip().lower(): float(cost) for name, cost in source.items()}
        self.fallback = float(fallback)

    def cost_for(self, governorate: str | None) -> float:
        if not governorate:
            return self.fallback
        return self._rates.get(governorate.strip().lower(), self.fallback)
