"""Tunable thresholds for the rate engine, grouped per component"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SolverPolicy:
    """Newton-Raphson stopping rules"""

    initial_guess: float = 0.10
    tolerance: float = 1e-7
    max_iterations: int = 50
    divergence_bound: float = 100.0  # 10,000% per period
    # start from the flat rate implied by the schedule instead of initial_guess
    seed_from_schedule: bool = True


@dataclass(frozen=True)
class UnitInferencePolicy:
    """
    Magnitude cutoffs (percent) for guessing the unit of an unlabeled rate.

    The cutoffs are product guesses awaiting calibration against real offers,
    not derived constants:
    - daily_ceiling: raw values below this read as daily rates
    - implausible_ceiling: annual candidates below this are suspicious
    - corroborating_floor: only second-guess when the estimated APR exceeds this
    """

    daily_ceiling: float = 0.2
    implausible_ceiling: float = 2.5
    corroborating_floor: float = 6.0


@dataclass(frozen=True)
class ReconcilePolicy:
    """Sanity band and materiality thresholds for accepting an exact APR"""

    periods_per_year: int = 12
    min_plausible_apr: float = 0.0
    max_plausible_apr: float = 1000.0
    correction_threshold: float = 1.0
    significant_divergence_threshold: float = 5.0
    variance_note_threshold: float = 0.1
    max_term_periods: int = 1200


@dataclass(frozen=True)
class RiskPolicy:
    """APR bands (percent) used to label an offer"""

    low_ceiling: float = 10.0
    medium_ceiling: float = 24.0
    high_ceiling: float = 36.0
    misleading_gap: float = 15.0


@dataclass(frozen=True)
class EnginePolicy:
    solver: SolverPolicy = field(default_factory=SolverPolicy)
    units: UnitInferencePolicy = field(default_factory=UnitInferencePolicy)
    reconcile: ReconcilePolicy = field(default_factory=ReconcilePolicy)
    risk: RiskPolicy = field(default_factory=RiskPolicy)


DEFAULT_POLICY = EnginePolicy()
