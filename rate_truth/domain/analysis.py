"""Offer analysis - main entry point tying normalizer, reconciler and risk bands"""

import dataclasses
from typing import Any, Mapping, Optional

from rate_truth.domain.cashflow import parse_loan_parameters
from rate_truth.domain.irr import TraceCollector
from rate_truth.domain.models import OfferAnalysis, RateClaim
from rate_truth.domain.normalizer import normalize_rate_claim
from rate_truth.domain.policy import DEFAULT_POLICY, EnginePolicy
from rate_truth.domain.reconciler import reconcile
from rate_truth.domain.risk import classify_risk


def analyze_offer(
    ai_estimated_apr: float,
    raw_params: Optional[Mapping[str, Any]] = None,
    rate_claim: Optional[RateClaim] = None,
    policy: EnginePolicy = DEFAULT_POLICY,
    collector: Optional[TraceCollector] = None,
) -> OfferAnalysis:
    """
    Run one complete analysis for an offer described by the AI collaborator.

    Flow:
    1. Annualize the advertised rate, using the AI APR to resolve unit ambiguity
    2. Validate the extracted loan parameters
    3. Reconcile the AI APR against the exact IRR
    4. Band the final APR, flagging advertised rates that understate it

    Never raises for bad input; problems surface as verification warnings.
    """
    nominal = None
    if rate_claim is not None:
        nominal = normalize_rate_claim(rate_claim, ai_estimated_apr, policy.units)

    params = parse_loan_parameters(raw_params, max_term=policy.reconcile.max_term_periods)
    result = reconcile(ai_estimated_apr, params, policy, collector)

    details = result.trace
    if nominal is not None and nominal.note:
        details = dataclasses.replace(details, explanation=f"{details.explanation}\n\n{nominal.note}")

    nominal_apr = nominal.annualized.value if nominal is not None else None
    return OfferAnalysis(
        final_apr=result.final_apr,
        ai_estimated_apr=ai_estimated_apr,
        risk_level=classify_risk(result.final_apr, nominal_apr, policy.risk),
        verification=result.verification,
        calculation_details=details,
        nominal_rate=nominal,
        solver_status=result.solver_status,
    )
