from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ListingDraft(BaseModel):
    """Everything needed to publish one account listing."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    description: str
    unit_price: Decimal = Field(..., gt=0)
    server_code: str = "EUW"
    rank_code: str = "unranked"
    champions_count: int = Field(default=0, ge=0)
    skins_count: int = Field(default=0, ge=0)
    # Pre-serialized credential text, uploaded as-is
    credential_payload: str = Field(..., min_length=1)
    screenshot_url: Optional[str] = None


class OfferStage(str, Enum):
    start = "start"
    placeholder_created = "placeholder_created"
    details_populated = "details_populated"
    credentials_uploaded = "credentials_uploaded"
    job_submitted = "job_submitted"


@dataclass
class OfferRecord:
    """Remote-side progress of one publish call."""
    offer_id: Optional[str] = None
    relation_id: Optional[str] = None
    stage: OfferStage = OfferStage.start

    @property
    def job_submitted(self) -> bool:
        return self.stage == OfferStage.job_submitted

    @property
    def file_name(self) -> str:
        return f"{self.offer_id}.txt"

    def describe(self) -> str:
        return f"offer_id={self.offer_id or '-'} relation_id={self.relation_id or '-'} stage={self.stage.value}"
