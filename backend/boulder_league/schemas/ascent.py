from datetime import date, datetime
from typing import Optional

from boulder_league.schemas.climber import PromotionCheck
from pydantic import BaseModel, Field


class AscentBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    absolute_grade: int = Field(..., ge=0)
    is_flash: bool = False
    sent_date: Optional[date] = None


class AscentCreate(AscentBase):
    pass


class Ascent(AscentBase):
    id: str
    climber_id: str
    # Snapshot of the climber's working grade when the ascent was logged
    working_grade_when_sent: int = Field(..., ge=0)
    create_date: datetime

    model_config = {"from_attributes": True, "frozen": True}


class AscentWithPoints(Ascent):
    points: int


class AscentLogged(BaseModel):
    ascent: Ascent
    points: int
    running_score: int
    promotion: PromotionCheck
