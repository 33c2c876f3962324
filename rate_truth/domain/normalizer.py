"""Nominal rate normalization - bring advertised rates to an annual basis"""

from typing import Optional

from rate_truth.domain.models import RateClaim, RateNormalization, RateUnit
from rate_truth.domain.policy import UnitInferencePolicy
from rate_truth.utils.formatting import format_percent

# Simple (non-compounded) multipliers: these model advertised nominal rates,
# not the compounded IRR.
PERIODS_PER_YEAR = {
    RateUnit.DAY: 365,
    RateUnit.MONTH: 12,
    RateUnit.YEAR: 1,
}

_UNIT_LABELS = {
    RateUnit.DAY: "daily",
    RateUnit.MONTH: "monthly",
    RateUnit.YEAR: "yearly",
}


def infer_unit(
    annualized_guess: float,
    corroborating_signal: Optional[float],
    policy: UnitInferencePolicy = UnitInferencePolicy(),
) -> RateUnit:
    """
    Guess the period unit of a rate from its magnitude.

    Only second-guesses YEAR when the candidate is implausibly low while the
    corroborating APR is materially higher:
    - candidate < daily_ceiling              → DAY
    - daily_ceiling <= candidate < implausible_ceiling → MONTH
    - anything else                          → YEAR
    """
    if corroborating_signal is None:
        return RateUnit.YEAR
    if annualized_guess <= 0:
        return RateUnit.YEAR
    if annualized_guess >= policy.implausible_ceiling:
        return RateUnit.YEAR
    if corroborating_signal <= policy.corroborating_floor:
        return RateUnit.YEAR

    if annualized_guess < policy.daily_ceiling:
        return RateUnit.DAY
    return RateUnit.MONTH


def normalize_rate_claim(
    claim: RateClaim,
    corroborating_apr: Optional[float] = None,
    policy: UnitInferencePolicy = UnitInferencePolicy(),
) -> RateNormalization:
    """
    Annualize a claim and keep an honest record of any unit inference.

    DAY and MONTH claims are trusted as labeled. UNKNOWN claims, and YEAR
    claims that look implausibly low next to the corroborating APR, go through
    infer_unit. Non-positive values pass through untouched.
    """
    if claim.value <= 0:
        return RateNormalization(original=claim, annualized=claim)

    if claim.unit in (RateUnit.DAY, RateUnit.MONTH):
        annual = claim.value * PERIODS_PER_YEAR[claim.unit]
        return RateNormalization(original=claim, annualized=RateClaim(annual, RateUnit.YEAR))

    # UNKNOWN or YEAR: the raw value is the annual candidate
    unit = infer_unit(claim.value, corroborating_apr, policy)
    if unit is RateUnit.YEAR:
        return RateNormalization(
            original=claim,
            annualized=RateClaim(claim.value, RateUnit.YEAR),
            inferred_unit=RateUnit.YEAR if claim.unit is RateUnit.UNKNOWN else None,
        )

    annual = claim.value * PERIODS_PER_YEAR[unit]
    label = "unlabeled" if claim.unit is RateUnit.UNKNOWN else "yearly"
    note = (
        f"[Unit correction] Advertised {label} rate {format_percent(claim.value, 4)} "
        f"is implausibly low next to the estimated real APR "
        f"{format_percent(corroborating_apr)}; read as a {_UNIT_LABELS[unit]} rate: "
        f"{format_percent(claim.value, 4)} x {PERIODS_PER_YEAR[unit]} = "
        f"{format_percent(annual)} per year."
    )
    return RateNormalization(
        original=claim,
        annualized=RateClaim(annual, RateUnit.YEAR),
        inferred_unit=unit,
        note=note,
    )


def annualize(
    claim: RateClaim,
    corroborating_apr: Optional[float] = None,
    policy: UnitInferencePolicy = UnitInferencePolicy(),
) -> RateClaim:
    """Annualized copy of the claim (unit YEAR); the input is never mutated"""
    return normalize_rate_claim(claim, corroborating_apr, policy).annualized
