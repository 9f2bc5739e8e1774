"""Price catalog and money formatting for Stripe plans."""

from typing import Dict, Optional, Tuple

CURRENCY_SYMBOLS = {
    "usd": "$",
    "brl": "R$",
    "eur": "€",
    "gbp": "£",
}


class PriceCatalog:
    """Maps (recurrency, plan type) pairs to configured Stripe price IDs."""

    def __init__(self, price_ids: Dict[Tuple[str, str], str]) -> None:
        self._price_ids = dict(price_ids)
        self._plans = {price_id: plan_type for (_, plan_type), price_id in self._price_ids.items()}

    def price_id_for(self, recurrency: str, plan_type: str) -> Optional[str]:
        return self._price_ids.get((recurrency, plan_type.lower()))

    def plan_for_price_id(self, price_id: Optional[str]) -> str:
        """Display name of the plan a price belongs to, e.g. "Pro"."""
        plan_type = self._plans.get(price_id or "")
        if not plan_type:
            return price_id or "Unknown"
        return plan_type.capitalize()


def format_amount(amount: int, currency: str) -> str:
    """Format an amount in minor units, e.g. ``format_amount(2000, "usd") == "$20.00"``."""
    value = f"{amount / 100:,.2f}"
    symbol = CURRENCY_SYMBOLS.get((currency or "").lower())
    if symbol:
        return f"{symbol}{value}"
    return f"{value} {(currency or '').upper()}".strip()
