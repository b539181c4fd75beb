# services/split_calculator.py
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal, InvalidOperation
from typing import Union

from .errors import SplitCalculationError


@dataclass(frozen=True)
class RevenueSplit:
     amount: int
     fee_percent: Decimal
     creator_share: int
     platform_share: int


def calculate_split(amount: int, fee_percent: Union[Decimal, int, str]) -> RevenueSplit:
     """Divide a sale between the creator and the platform.

     ``creator_share`` is floored and ``platform_share`` takes the remainder,
     so the two always add up to ``amount`` exactly.
     """
     if isinstance(amount, bool) or not isinstance(amount, int):
          raise SplitCalculationError(f"amount must be an integer number of minor units, got {amount!r}")
     if amount <= 0:
          raise SplitCalculationError("amount must be > 0")

     try:
          pct = Decimal(str(fee_percent))
     except InvalidOperation:
          raise SplitCalculationError(f"invalid fee percent: {fee_percent!r}")
     if not pct.is_finite() or pct < 0 or pct > 100:
          raise SplitCalculationError(f"fee percent must be within [0, 100], got {fee_percent}")

     creator = (Decimal(amount) * (Decimal("100") - pct) / Decimal("100")).to_integral_value(rounding=ROUND_FLOOR)
     creator_share = int(creator)
     platform_share = amount - creator_share
     return RevenueSplit(
          amount=amount,
          fee_percent=pct,
          creator_share=creator_share,
          platform_share=platform_share,
     )
