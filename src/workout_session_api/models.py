"""Data models for workout protocols and session outcomes."""
from pydantic import BaseModel, Field
from typing import Annotated, List, Optional, Literal, Union

BlockType = Literal["exercise", "checklist", "superset", "timed"]
IntervalKind = Literal["countdown", "instructional_card"]
ChecklistItemKind = Literal["subheading", "header", "item"]

DEFAULT_SECTION = "General"


class Interval(BaseModel):
    """One step of a timed block: a countdown or an instruction card."""
    seconds: int = Field(default=0, ge=0)
    kind: IntervalKind = "countdown"
    zone: Optional[str] = None
    text: Optional[str] = None
    note: Optional[str] = None
    raw_text: Optional[str] = None  # Original template line, shown in "up next"

    class Config:
        extra = "ignore"
        frozen = True

    @property
    def zone_or_text(self) -> str:
        return self.zone or self.text or ""

    @property
    def is_countdown(self) -> bool:
        return self.kind == "countdown"

    def label(self) -> str:
        """Short human label used for hub details and history rows."""
        if self.raw_text:
            return self.raw_text
        if self.is_countdown:
            return f"{self.seconds}s {self.zone_or_text}".strip()
        return self.zone_or_text


class ChecklistItem(BaseModel):
    """Checklist line. Items with details render as a disclosure, not a checkbox."""
    kind: ChecklistItemKind = "item"
    text: str = ""
    details: List[str] = Field(default_factory=list)

    class Config:
        extra = "ignore"
        frozen = True

    @property
    def is_label(self) -> bool:
        return self.kind in ("subheading", "header")

    @property
    def is_disclosure(self) -> bool:
        return self.kind == "item" and len(self.details) > 0


class SupersetExercise(BaseModel):
    name: str
    reps: Optional[Union[int, str]] = None

    class Config:
        extra = "ignore"
        frozen = True


class _BlockBase(BaseModel):
    name: str
    section: str = DEFAULT_SECTION
    xp_value: int = 0
    rest_seconds: Optional[int] = Field(default=None, ge=0)
    description: Optional[str] = None
    tips: List[str] = Field(default_factory=list)

    class Config:
        extra = "ignore"  # Ignore colour hints and other presentation fields
        frozen = True

    @property
    def section_name(self) -> str:
        return self.section or DEFAULT_SECTION


class ExerciseBlock(_BlockBase):
    """Straight sets of a single exercise."""
    type: Literal["exercise"] = "exercise"
    sets: int = Field(default=1, ge=1)
    reps_per_set: Optional[Union[int, str]] = None  # 10, or display text like "8-12"
    reps_list: Optional[List[Union[int, str]]] = None  # Per-set override


class ChecklistBlock(_BlockBase):
    """Freeform self-paced list."""
    type: Literal["checklist"] = "checklist"
    items: List[ChecklistItem] = Field(default_factory=list)


class SupersetBlock(_BlockBase):
    """Exercises performed back to back for a number of rounds."""
    type: Literal["superset"] = "superset"
    sets: int = Field(default=3, ge=1)
    exercises: List[SupersetExercise] = Field(default_factory=list)


class TimedBlock(_BlockBase):
    """Sequence of intervals (treadmill, conditioning)."""
    type: Literal["timed"] = "timed"
    intervals: List[Interval] = Field(default_factory=list)


Block = Annotated[
    Union[ExerciseBlock, ChecklistBlock, SupersetBlock, TimedBlock],
    Field(discriminator="type"),
]


class BlockEnvelope(BaseModel):
    """Wrapper used to validate a single raw block dict."""
    block: Block


class SetRecord(BaseModel):
    """One logged set: parsed weight and resolved reps."""
    weight: float = 0.0
    reps: int = 0


class ExerciseLog(BaseModel):
    name: str
    sets: List[SetRecord] = Field(default_factory=list)


class BlockOutcome(BaseModel):
    """Terminal result reported by a block runner."""
    skipped: bool = False
    payload: List[ExerciseLog] = Field(default_factory=list)
