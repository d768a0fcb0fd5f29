from __future__ import annotations

from dataclasses import dataclass


INDEPENDENT_DEAL = "independent"


@dataclass(frozen=True)
class LabelDeal:
    deal_type: str = INDEPENDENT_DEAL
    name: str = "Independent"
    monthly_fee: int = 0
    royalty_split: int = 0
    marketing_budget: int = 0
    playlist_pitch: bool = False
    radio_promo: bool = False
    contract_weeks: int = 0
    advance: int = 0
    fame_req: int = 0
    weeks_remaining: int = 0

    @property
    def is_independent(self) -> bool:
        return str(self.deal_type or "").strip().lower() == INDEPENDENT_DEAL
