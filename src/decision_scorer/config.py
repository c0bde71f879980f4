"""Centralized configuration management for the decision scorer."""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Score used for any criterion an option was not scored on.
DEFAULT_MISSING_SCORE = 0.0


class ScoringConfig(BaseModel):
    """Settings for the weighted score calculation."""
    missing_score: float = Field(
        DEFAULT_MISSING_SCORE,
        ge=0,
        le=10,
        description="Score assumed when an option has no score for a criterion"
    )


class ConstraintPenaltyConfig(BaseModel):
    """Multipliers applied for soft constraint violations.

    Budget ratio is estimated cost divided by budget. Penalties multiply,
    so an option can be penalized for budget and compliance together.
    """
    severe_budget_ratio: float = Field(
        1.5,
        description="Cost/budget ratio above which the severe penalty applies"
    )
    severe_budget_factor: float = Field(
        0.5,
        gt=0,
        le=1,
        description="Multiplier for options severely over budget"
    )
    over_budget_slope: float = Field(
        0.6,
        description="Penalty per unit of ratio over budget (moderate band)"
    )
    over_budget_floor: float = Field(
        0.7,
        gt=0,
        le=1,
        description="Lowest multiplier in the moderate over-budget band"
    )
    near_budget_ratio: float = Field(
        0.9,
        description="Cost/budget ratio above which the near-budget penalty applies"
    )
    near_budget_factor: float = Field(
        0.95,
        gt=0,
        le=1,
        description="Multiplier for options close to the budget limit"
    )
    compliance_floor: float = Field(
        0.7,
        gt=0,
        le=1,
        description="Multiplier at compliance score 0 (score 10 maps to 1.0)"
    )
    compliance_warning_below: float = Field(
        5.0,
        description="Compliance scores below this are reported as violations"
    )
    compliance_severe_below: float = Field(
        3.0,
        description="Compliance scores below this are severe violations"
    )


class ConfidenceThresholdsConfig(BaseModel):
    """Margin thresholds for confidence tiers.

    Margin is the top-two total score gap divided by the maximum possible
    score. Each threshold is an exclusive upper bound for its tier.
    """
    low_margin: float = Field(0.03, description="Margins below this are Low confidence")
    close_margin: float = Field(0.08, description="Margins below this are Medium (close competition)")
    clear_margin: float = Field(0.15, description="Margins below this are Medium (clear leader)")


class AnalysisConfig(BaseModel):
    """Rules used when explaining the recommendation."""
    strength_min_score: float = Field(7, description="Minimum winner score for a strength")
    weakness_max_score: float = Field(5, description="Maximum winner score for a weakness")
    max_strengths: int = Field(3, description="Number of strengths reported")
    max_weaknesses: int = Field(2, description="Number of weaknesses reported")
    close_gap: float = Field(
        0.5,
        description="Runner-up is 'very close' when the normalized gap is below this"
    )
    pro_min_score: float = Field(8, description="Scores at or above this are pros")
    con_max_score: float = Field(4, description="Scores at or below this are cons")


class SensitivityConfig(BaseModel):
    """Settings for tipping point and robustness analysis."""
    apply_constraints: bool = Field(
        False,
        description="Apply constraint penalties when re-ranking with changed weights"
    )
    sensitive_steps: int = Field(
        3,
        description="A tipping point within this many weight steps marks the criterion sensitive"
    )
    sensitive_criterion_penalty: float = Field(20, description="Robustness lost per sensitive criterion")
    close_gap: float = Field(0.5, description="Normalized gap below which the lead is considered close")
    close_gap_penalty: float = Field(20, description="Robustness lost for a close lead")
    robust_threshold: float = Field(60, description="Minimum robustness for a robust decision")


class SimulationConfig(BaseModel):
    """Settings for Monte Carlo simulation."""
    simulations: int = Field(1000, ge=1, description="Number of randomized trials")
    seed: Optional[int] = Field(None, description="Seed for reproducible simulations")


class DecisionScorerConfig(BaseModel):
    """Complete configuration for the decision scorer."""
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    constraint_penalties: ConstraintPenaltyConfig = Field(default_factory=ConstraintPenaltyConfig)
    confidence_thresholds: ConfidenceThresholdsConfig = Field(default_factory=ConfidenceThresholdsConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    sensitivity: SensitivityConfig = Field(default_factory=SensitivityConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)


# Global config instance
_config: Optional[DecisionScorerConfig] = None


def get_config() -> DecisionScorerConfig:
    """Get the current configuration.

    Returns the global config, initializing with defaults if not yet loaded.
    """
    global _config
    if _config is None:
        _config = DecisionScorerConfig()
    return _config


def load_config(path: Path) -> DecisionScorerConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        The loaded DecisionScorerConfig.
    """
    global _config

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    _config = DecisionScorerConfig.model_validate(data or {})
    logger.debug("Loaded decision scorer config from %s", path)
    return _config


def reset_config() -> None:
    """Reset configuration to defaults."""
    global _config
    _config = DecisionScorerConfig()


def find_config_file() -> Optional[Path]:
    """Find a decision scorer configuration file.

    Looks in (order of priority):
    1. DECISION_SCORER_CONFIG environment variable
    2. ./decision-config.yaml
    3. ./decision-config.yml
    4. ~/.config/decision-scorer/config.yaml
    """
    env_path = os.environ.get("DECISION_SCORER_CONFIG")
    if env_path:
        path = Path(env_path)
        if path.exists():
            return path
        logger.warning("DECISION_SCORER_CONFIG points to missing file: %s", env_path)

    for name in ["decision-config.yaml", "decision-config.yml"]:
        path = Path(name)
        if path.exists():
            return path

    user_config = Path.home() / ".config" / "decision-scorer" / "config.yaml"
    if user_config.exists():
        return user_config

    return None


def save_default_config(path: Path) -> None:
    """Save the default configuration to a YAML file.

    Args:
        path: Path where to save the configuration.
    """
    data = DecisionScorerConfig().model_dump()

    yaml_content = """# Decision Scorer Configuration
# =============================
#
# This file configures the default score policy, constraint penalties,
# confidence thresholds, rationale rules, sensitivity analysis and
# Monte Carlo simulation.
#
# Copy this file to one of these locations:
#   - ./decision-config.yaml (current directory)
#   - ~/.config/decision-scorer/config.yaml (user config)
#
# Or set the DECISION_SCORER_CONFIG environment variable.

"""
    yaml_content += yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(yaml_content)
