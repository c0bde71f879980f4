"""Pydantic models for the Decision Scoring Engine.

Input schemas for options, criteria and constraints, and output schemas for
rankings, confidence, rationale, sensitivity and simulation results.
These schemas match the decision format exchanged with the authoring,
persistence and sharing layers.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Enums
# =============================================================================


class ViolationSeverity(str, Enum):
    """Severity of a soft constraint violation."""
    MINOR = "minor"
    MODERATE = "moderate"
    SEVERE = "severe"


class ViolationType(str, Enum):
    """Source of a soft constraint violation."""
    BUDGET = "budget"
    NOTES = "notes"  # Compliance score derived from constraint notes


class ConfidenceLevel(str, Enum):
    """Confidence tier for the top recommendation."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TippingDirection(str, Enum):
    """Direction a criterion weight must move to change the winner."""
    INCREASE = "increase"
    DECREASE = "decrease"


class RationaleKind(str, Enum):
    """Clause types of the structured rationale, in narrative order."""
    WINNER = "winner"
    STRENGTHS = "strengths"
    RUNNER_UP = "runner_up"
    WEAKNESSES = "weaknesses"


# =============================================================================
# Input Models
# =============================================================================


class Criterion(BaseModel):
    """A weighted dimension of evaluation."""
    id: str
    name: str = ""
    weight: int = Field(5, ge=1, le=10, description="Relative importance (1-10)")

    @field_validator("weight", mode="before")
    @classmethod
    def default_missing_weight(cls, v):
        """Missing weights fall back to the neutral midpoint."""
        return 5 if v is None else v


class Option(BaseModel):
    """A candidate alternative being decided between."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    scores: dict[str, float] = Field(
        default_factory=dict,
        description="Score per criterion id (0-10, sparse)"
    )
    estimated_cost: Optional[str] = Field(None, alias="estimatedCost")
    constraint_compliance: Optional[float] = Field(
        None,
        alias="constraintCompliance",
        description="Compliance score (0-10) from external constraint analysis"
    )

    @field_validator("scores", mode="before")
    @classmethod
    def clamp_scores(cls, v):
        """Keep every score inside the 0-10 scale, dropping unusable values."""
        if not v:
            return {}
        clamped = {}
        for criterion_id, score in dict(v).items():
            if score is None:
                continue
            try:
                value = float(score)
            except (TypeError, ValueError):
                continue
            clamped[criterion_id] = max(0.0, min(10.0, value))
        return clamped

    @field_validator("estimated_cost", mode="before")
    @classmethod
    def stringify_cost(cls, v):
        if v is None or v == "":
            return None
        return str(v)

    @field_validator("constraint_compliance")
    @classmethod
    def clamp_compliance(cls, v):
        if v is None:
            return None
        return max(0.0, min(10.0, v))


class Constraints(BaseModel):
    """Soft constraints. They never eliminate an option, only penalize it."""
    budget: Optional[str] = None  # Currency-like formatting allowed, e.g. "$1,500"
    deadline: Optional[str] = None  # ISO date string
    notes: Optional[str] = None

    @field_validator("budget", mode="before")
    @classmethod
    def stringify_budget(cls, v):
        if v is None or v == "":
            return None
        return str(v)


class ScoreRange(BaseModel):
    """Inclusive uncertainty range for one option's score on one criterion."""
    min: float = Field(..., ge=0, le=10)
    max: float = Field(..., ge=0, le=10)


class TemplateCriterion(BaseModel):
    """A criterion as declared by a decision template."""
    name: str
    weight: int = Field(5, ge=1, le=10)


class DecisionTemplate(BaseModel):
    """A pre-built decision for a common situation."""
    id: str
    name: str
    description: str = ""
    category: str
    options: list[str] = Field(default_factory=list)
    criteria: list[TemplateCriterion] = Field(default_factory=list)


class Decision(BaseModel):
    """A complete decision as authored, persisted or shared."""
    id: Optional[str] = None
    title: str = ""
    options: list[Option] = Field(default_factory=list)
    criteria: list[Criterion] = Field(default_factory=list)
    constraints: Constraints = Field(default_factory=Constraints)
    created_at: Optional[datetime] = None

    def with_default_scores(self, score: float) -> "Decision":
        """Return a copy where every option is scored on every criterion.

        Scores already present are kept; gaps are filled with ``score``.
        """
        filled = []
        for option in self.options:
            scores = dict(option.scores)
            for criterion in self.criteria:
                scores.setdefault(criterion.id, score)
            filled.append(option.model_copy(update={"scores": scores}))
        return self.model_copy(update={"options": filled})


# =============================================================================
# Scoring Models
# =============================================================================


class ScoreBreakdown(BaseModel):
    """Weighted score for one option against a criteria set."""
    raw: float
    max: float
    normalized: float  # 0-10


class CriterionScore(BaseModel):
    """Per-criterion contribution to an option's score."""
    criterion_id: str
    criterion_name: str
    weight: int
    score: float
    weighted_score: float


class ConstraintViolation(BaseModel):
    """A soft constraint an option fails to meet."""
    type: ViolationType
    severity: ViolationSeverity
    message: str


class ConstraintPenalty(BaseModel):
    """Multiplicative penalty for soft constraint violations."""
    factor: float = Field(1.0, gt=0, le=1)
    violations: list[ConstraintViolation] = Field(default_factory=list)


class RankedOption(BaseModel):
    """An option with its derived scores and rank.

    The input option is embedded unchanged; derived values live beside it.
    """
    option: Option
    total_score: float  # raw_score * constraint_penalty, the sort key
    raw_score: float
    max_possible: float
    normalized_score: float  # 0-10, after constraint penalty
    raw_normalized_score: float  # 0-10, before constraint penalty
    constraint_penalty: float = 1.0
    constraint_violations: list[ConstraintViolation] = Field(default_factory=list)
    criteria_scores: list[CriterionScore] = Field(default_factory=list)
    rank: int = Field(..., ge=1)

    @property
    def id(self) -> str:
        return self.option.id

    @property
    def name(self) -> str:
        return self.option.name

    @property
    def scores(self) -> dict[str, float]:
        return self.option.scores

    def criterion_score(self, criterion_id: str) -> Optional[float]:
        """Score used for a criterion during ranking, if it was ranked on it."""
        for cs in self.criteria_scores:
            if cs.criterion_id == criterion_id:
                return cs.score
        return None


class Confidence(BaseModel):
    """Certainty of the recommendation derived from the top-two margin."""
    level: ConfidenceLevel
    value: float = Field(..., ge=0, le=1)
    label: str
    message: Optional[str] = None


# =============================================================================
# Analysis Models
# =============================================================================


class Strength(BaseModel):
    """A criterion where the winner clearly excels."""
    criterion_id: str
    name: str
    score: float
    advantage: float  # Winner score minus mean score across options


class Weakness(BaseModel):
    """A criterion where the winner trails the best option."""
    criterion_id: str
    name: str
    score: float
    deficit: float  # Best score minus winner score


class Tradeoff(BaseModel):
    """Pros and cons of one option, judged on its own scores."""
    option_id: str
    option_name: str
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)


class RationaleClause(BaseModel):
    """One clause of the recommendation narrative."""
    kind: RationaleKind
    text: str
    subjects: list[str] = Field(default_factory=list)  # Option or criterion names mentioned


class Analysis(BaseModel):
    """Explanation of why the winner won."""
    winner: str
    runner_up: Optional[str] = None
    strengths: list[Strength] = Field(default_factory=list)
    weaknesses: list[Weakness] = Field(default_factory=list)
    rationale: str = ""
    rationale_clauses: list[RationaleClause] = Field(default_factory=list)
    constraint_warnings: list[str] = Field(default_factory=list)
    tradeoffs: list[Tradeoff] = Field(default_factory=list)


class RankingResult(BaseModel):
    """Complete output of the ranking engine.

    For empty input, ``confidence`` is the number 0 and ``analysis`` is None.
    """
    rankings: list[RankedOption] = Field(default_factory=list)
    confidence: Union[Confidence, float] = 0
    analysis: Optional[Analysis] = None

    @property
    def winner(self) -> Optional[RankedOption]:
        return self.rankings[0] if self.rankings else None


# =============================================================================
# Sensitivity Models
# =============================================================================


class TippingPoint(BaseModel):
    """How far one criterion's weight must move to change the winner."""
    criterion_id: str
    criterion_name: str
    current_weight: int
    winner_score: float
    runner_up_score: float
    score_diff: float
    tipping_weight: Optional[int] = None
    direction: Optional[TippingDirection] = None
    is_sensitive: bool = False


class SensitivityResult(BaseModel):
    """Robustness of the current winner to weight changes."""
    winner: RankedOption
    runner_up: RankedOption
    gap_to_runner_up: float
    robustness: float = Field(..., ge=0, le=100)
    tipping_points: list[TippingPoint] = Field(default_factory=list)
    sensitive_criteria: list[TippingPoint] = Field(default_factory=list)
    is_robust: bool


class WhatIfResult(BaseModel):
    """Ranking outcome after changing a single criterion weight."""
    original_winner: Optional[str] = None
    new_winner: Optional[str] = None
    changed: bool = False
    new_rankings: list[RankedOption] = Field(default_factory=list)


class TippingPointSummary(BaseModel):
    """First weight, scanning 1 to 10, at which the winner changes."""
    criterion_name: str
    tipping_weight: int
    new_winner: str


# =============================================================================
# Simulation Models
# =============================================================================


class SimulationOutcome(BaseModel):
    """How often one option won across simulation trials."""
    id: str
    name: str
    wins: int = 0
    percentage: str = "0.0"  # Formatted to one decimal place


class MonteCarloResult(BaseModel):
    """Win probabilities under score uncertainty."""
    results: list[SimulationOutcome] = Field(default_factory=list)
    simulations: int
    most_likely: Optional[SimulationOutcome] = None


# =============================================================================
# Report
# =============================================================================


class DecisionReport(BaseModel):
    """Everything the engine computes for one decision."""
    scoring_version: str = Field(default="1.0.0")
    scored_at: datetime = Field(default_factory=datetime.utcnow)
    decision_title: str = ""
    ranking: RankingResult
    sensitivity: Optional[SensitivityResult] = None
    simulation: Optional[MonteCarloResult] = None
    days_until_deadline: Optional[int] = None
    processing_warnings: list[str] = Field(default_factory=list)
