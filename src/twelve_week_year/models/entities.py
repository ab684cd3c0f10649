"""
Pydantic data models for cycles, goals, tactics and scores.

Defines type-safe models for the stored records and for the derived,
non-persisted score summaries handed to the presentation layer.
"""

from datetime import date, datetime
from typing import Optional, List, Dict
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class DayKey(str, Enum):
    """Day-of-week keys, Sunday first."""
    SUN = "sun"
    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"


DAY_KEYS: List[str] = [day.value for day in DayKey]

DAY_LABELS: Dict[str, str] = {
    "sun": "Sun", "mon": "Mon", "tue": "Tue", "wed": "Wed",
    "thu": "Thu", "fri": "Fri", "sat": "Sat",
}


class ScoreBand(str, Enum):
    """Execution score classification."""
    ON_TRACK = "on track"
    NEEDS_IMPROVEMENT = "needs improvement"
    CRITICAL = "critical"


class Cycle(BaseModel):
    """
    A 12-week planning period.

    end_date is always start_date + 83 days.
    """
    id: Optional[int] = None
    title: str
    start_date: date
    end_date: date
    vision: str = ""
    is_active: bool = False
    created_at: Optional[datetime] = None

    class Config:
        """Pydantic configuration."""
        from_attributes = True


class Goal(BaseModel):
    """A top-level outcome within a cycle."""
    id: Optional[int] = None
    cycle_id: int
    title: str
    description: str = ""
    sort_order: int = 0
    created_at: Optional[datetime] = None

    class Config:
        """Pydantic configuration."""
        from_attributes = True


class Tactic(BaseModel):
    """A recurring weekly action with a days-per-week target."""
    id: Optional[int] = None
    goal_id: int
    title: str
    weekly_target: int = Field(default=7, ge=1, le=7)
    sort_order: int = 0
    created_at: Optional[datetime] = None

    class Config:
        """Pydantic configuration."""
        from_attributes = True


class DailyCompletion(BaseModel):
    """
    Completion vector for one tactic in one cycle week.

    Unique per (cycle_id, week_number, tactic_id).
    """
    id: Optional[int] = None
    cycle_id: int
    week_number: int = Field(ge=1, le=12)
    tactic_id: int
    sun: bool = False
    mon: bool = False
    tue: bool = False
    wed: bool = False
    thu: bool = False
    fri: bool = False
    sat: bool = False

    @property
    def days(self) -> List[bool]:
        return [getattr(self, key) for key in DAY_KEYS]

    @property
    def days_done(self) -> int:
        return sum(self.days)

    class Config:
        """Pydantic configuration."""
        from_attributes = True


class WeeklyReview(BaseModel):
    """Weekly reflection text, one per (cycle_id, week_number)."""
    id: Optional[int] = None
    cycle_id: int
    week_number: int = Field(ge=1, le=12)
    wins: str = ""
    improvements: str = ""
    insights: str = ""
    created_at: Optional[datetime] = None

    class Config:
        """Pydantic configuration."""
        from_attributes = True


class TacticWeek(BaseModel):
    """
    One scorecard line: a tactic joined with its goal and week vector.

    Tactics without a completion row carry an all-false vector.
    """
    tactic_id: int
    tactic_title: str
    goal_id: int
    goal_title: str
    weekly_target: int
    sun: bool = False
    mon: bool = False
    tue: bool = False
    wed: bool = False
    thu: bool = False
    fri: bool = False
    sat: bool = False

    @property
    def days(self) -> List[bool]:
        return [getattr(self, key) for key in DAY_KEYS]

    @property
    def days_done(self) -> int:
        return sum(self.days)

    @property
    def target_met(self) -> bool:
        return self.days_done >= self.weekly_target

    def done_on(self, day: str) -> bool:
        return bool(getattr(self, day))

    class Config:
        """Pydantic configuration."""
        from_attributes = True


class WeekScoreSummary(BaseModel):
    """Execution score of one cycle week."""
    week_number: int
    total_tactics: int = Field(default=0, ge=0)
    completed_tactics: int = Field(default=0, ge=0)
    score: int = Field(default=0, ge=0, le=100)

    @field_validator("completed_tactics")
    @classmethod
    def validate_completed(cls, v: int, info) -> int:
        """Validate completed_tactics <= total_tactics."""
        if "total_tactics" in info.data and v > info.data["total_tactics"]:
            raise ValueError("completed_tactics cannot exceed total_tactics")
        return v


class GoalProgress(BaseModel):
    """Progress of one goal over a week or the whole cycle."""
    goal_id: int
    goal_title: str
    total_tactics: int = Field(default=0, ge=0)
    completed_tactics: int = Field(default=0, ge=0)
    score: int = Field(default=0, ge=0, le=100)


class TodayChecklist(BaseModel):
    """Tactics of the current week with their state for a single day."""
    day: DayKey
    items: List[TacticWeek] = Field(default_factory=list)
    done_count: int = 0
    total: int = 0
    progress: int = Field(default=0, ge=0, le=100)


class CycleDashboard(BaseModel):
    """Everything the dashboard view needs for one cycle."""
    cycle: Cycle
    current_week: int = Field(ge=0, le=13)
    week_scores: List[WeekScoreSummary]
    goal_progress: List[GoalProgress]
    overall_score: int = Field(ge=0, le=100)
    overall_band: ScoreBand
    overall_color: str
    current_score: Optional[WeekScoreSummary] = None
    trend: Optional[str] = None
    uncompleted_tactics: int = 0
