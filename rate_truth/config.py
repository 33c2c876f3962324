"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from rate_truth.domain.policy import (
    EnginePolicy,
    ReconcilePolicy,
    RiskPolicy,
    SolverPolicy,
    UnitInferencePolicy,
)


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "rate-truth-engine"
    log_level: str = "INFO"

    # IRR solver
    solver_initial_guess: float = 0.10
    solver_tolerance: float = 1e-7
    solver_max_iterations: int = 50
    solver_divergence_bound: float = 100.0
    solver_seed_from_schedule: bool = True

    # Reconciliation
    periods_per_year: int = 12  # Extracted terms are monthly
    min_plausible_apr: float = 0.0
    max_plausible_apr: float = 1000.0
    correction_threshold: float = 1.0  # Percentage points
    significant_divergence_threshold: float = 5.0
    variance_note_threshold: float = 0.1
    max_term_periods: int = 1200

    # Unit inference (uncalibrated product guesses, in percent)
    unit_daily_ceiling: float = 0.2
    unit_implausible_ceiling: float = 2.5
    unit_corroborating_floor: float = 6.0

    # Risk bands (percent APR)
    risk_low_ceiling: float = 10.0
    risk_medium_ceiling: float = 24.0
    risk_high_ceiling: float = 36.0
    risk_misleading_gap: float = 15.0


def build_policy(config: Settings) -> EnginePolicy:
    """Translate flat settings into the domain's policy objects"""
    return EnginePolicy(
        solver=SolverPolicy(
            initial_guess=config.solver_initial_guess,
            tolerance=config.solver_tolerance,
            max_iterations=config.solver_max_iterations,
            divergence_bound=config.solver_divergence_bound,
            seed_from_schedule=config.solver_seed_from_schedule,
        ),
        units=UnitInferencePolicy(
            daily_ceiling=config.unit_daily_ceiling,
            implausible_ceiling=config.unit_implausible_ceiling,
            corroborating_floor=config.unit_corroborating_floor,
        ),
        reconcile=ReconcilePolicy(
            periods_per_year=config.periods_per_year,
            min_plausible_apr=config.min_plausible_apr,
            max_plausible_apr=config.max_plausible_apr,
            correction_threshold=config.correction_threshold,
            significant_divergence_threshold=config.significant_divergence_threshold,
            variance_note_threshold=config.variance_note_threshold,
            max_term_periods=config.max_term_periods,
        ),
        risk=RiskPolicy(
            low_ceiling=config.risk_low_ceiling,
            medium_ceiling=config.risk_medium_ceiling,
            high_ceiling=config.risk_high_ceiling,
            misleading_gap=config.risk_misleading_gap,
        ),
    )


settings = Settings()
