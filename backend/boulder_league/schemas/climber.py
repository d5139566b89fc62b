from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator


class ClimberBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)


class ClimberCreate(ClimberBase):
    working_grade: int = Field(..., ge=0, description="Starting working grade (V scale)")
    ascents_of_next_grade: int = Field(
        default=0,
        ge=0,
        description="Sends at working_grade + 1 completed before joining the league",
    )

    @model_validator(mode="after")
    def check_next_grade_count(self):
        if self.ascents_of_next_grade > self.working_grade + 1:
            raise ValueError(
                f"ascents_of_next_grade must be between 0 and {self.working_grade + 1}"
            )
        return self


class Climber(ClimberBase):
    id: str
    nickname: Optional[str] = None
    working_grade: int = Field(0, ge=0)
    running_score: int = 0
    ascents_of_next_grade: int = Field(0, ge=0)
    promotion_input_needed: bool = False

    model_config = {"from_attributes": True}


class PromotionResolve(BaseModel):
    ascents_of_next_grade: int


class PromotionCheck(BaseModel):
    promoted: bool
    new_tier: Optional[int] = None


class PromotionStatus(BaseModel):
    climber_id: str
    state: Literal["stable", "pending_promotion_input"]
    working_grade: int
    next_grade: int
    sends: int
    needed: int
    # Inclusive bounds accepted by the reconciliation update
    reconciliation_range: tuple[int, int]


class GradeCount(BaseModel):
    grade: int
    sends: int
    flashes: int = 0
