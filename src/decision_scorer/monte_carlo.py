"""Monte Carlo Simulator - Phase 7 of the Decision Scoring Engine.

Estimates how often each option wins when scores are uncertain.
Each trial draws integer scores uniformly from the supplied ranges and
re-runs the full ranking pipeline. Trials share no state, so the loop
is re-entrant and can be split across workers.
"""

import logging
import math
import random
from typing import Mapping, Optional, Union

from .config import get_config
from .ranking import generate_rankings
from .schema import (
    Criterion,
    MonteCarloResult,
    Option,
    ScoreRange,
    SimulationOutcome,
)
from .scorer import resolve_default_score

logger = logging.getLogger(__name__)

# option id -> criterion id -> range
ScoreRanges = Mapping[str, Mapping[str, Union[ScoreRange, Mapping[str, float]]]]


def _clamp_score(value: float) -> float:
    return max(0.0, min(10.0, value))


def _as_range(value) -> Optional[ScoreRange]:
    """Coerce a range entry, or None to keep the option's fixed score.

    Bounds outside the 0-10 scale are clamped into it.
    """
    if isinstance(value, ScoreRange):
        return value
    if not isinstance(value, Mapping):
        return None
    try:
        low = float(value.get("min"))
        high = float(value.get("max"))
    except (TypeError, ValueError):
        return None
    if math.isnan(low) or math.isnan(high):
        return None
    return ScoreRange(min=_clamp_score(low), max=_clamp_score(high))


def random_in_range(rng: random.Random, low: float, high: float) -> int:
    """Uniform draw from [low, high], rounded to the nearest integer.

    Halves round up, so a draw of 2.5 becomes 3.
    """
    return math.floor(low + rng.random() * (high - low) + 0.5)


def simulate_options(
    options: list[Option],
    criteria: list[Criterion],
    score_ranges: Optional[ScoreRanges],
    rng: random.Random,
    default_score: float,
) -> list[Option]:
    """Draw one trial's scores for every option.

    Criteria without a range keep the option's fixed score, or the default
    score when the option was never scored on them.
    """
    score_ranges = score_ranges or {}
    simulated = []
    for option in options:
        ranges = score_ranges.get(option.id) or {}
        if not isinstance(ranges, Mapping):
            logger.debug("Ignoring score ranges for %s: %r", option.id, ranges)
            ranges = {}
        scores = {}
        for criterion in criteria:
            score_range = _as_range(ranges.get(criterion.id))
            if score_range is not None:
                scores[criterion.id] = random_in_range(rng, score_range.min, score_range.max)
            else:
                scores[criterion.id] = option.scores.get(criterion.id, default_score)
        simulated.append(option.model_copy(update={"scores": scores}))
    return simulated


def run_simulation(
    options: list[Option],
    criteria: list[Criterion],
    score_ranges: Optional[ScoreRanges] = None,
    simulations: Optional[int] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
    default_score: Optional[float] = None,
) -> MonteCarloResult:
    """Estimate win probabilities under score uncertainty.

    Args:
        options: Options to simulate
        criteria: Weighted criteria
        score_ranges: Per-option, per-criterion inclusive score ranges
        simulations: Number of trials (defaults to config, 1000)
        rng: Random source; takes precedence over ``seed``
        seed: Seed for a fresh random source (defaults to config)
        default_score: Score for unscored criteria without a range

    Returns:
        Win counts and percentages per option, most wins first
    """
    cfg = get_config().simulation
    if simulations is None:
        simulations = cfg.simulations
    if rng is None:
        rng = random.Random(seed if seed is not None else cfg.seed)
    missing = resolve_default_score(default_score)

    wins = {o.id: 0 for o in options}

    for _ in range(simulations):
        trial = simulate_options(options, criteria, score_ranges, rng, missing)
        rankings = generate_rankings(trial, criteria, default_score=missing).rankings
        if rankings:
            wins[rankings[0].id] += 1

    results = [
        SimulationOutcome(
            id=o.id,
            name=o.name,
            wins=wins[o.id],
            percentage=f"{(wins[o.id] / simulations * 100) if simulations else 0:.1f}",
        )
        for o in options
    ]
    results.sort(key=lambda r: r.wins, reverse=True)

    logger.debug("Ran %d simulations over %d options", simulations, len(options))

    return MonteCarloResult(
        results=results,
        simulations=simulations,
        most_likely=results[0] if results else None,
    )
