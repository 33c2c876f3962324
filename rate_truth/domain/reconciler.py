"""Cross-validation of the AI-estimated APR against the exact IRR solve"""

import math
from typing import List, Optional, Tuple

from rate_truth.domain.cashflow import build_cash_flow, describe_cash_flow, schedule_rate_guess
from rate_truth.domain.irr import TraceCollector, solve_irr
from rate_truth.domain.models import (
    CalculationTrace,
    EngineWarning,
    EstimateVerification,
    ExactVerification,
    LoanParameters,
    Reconciliation,
    SolverResult,
    SolverStatus,
    WarningCode,
)
from rate_truth.domain.policy import DEFAULT_POLICY, EnginePolicy, ReconcilePolicy
from rate_truth.utils.formatting import format_amount, format_percent, format_signed

ESTIMATE_FORMULA = "IRR estimation"
ESTIMATE_EXPLANATION = "AI estimated the APR from the advertised rates; no usable repayment schedule was extracted."


def reconcile(
    ai_estimate: float,
    params: Optional[LoanParameters],
    policy: EnginePolicy = DEFAULT_POLICY,
    collector: Optional[TraceCollector] = None,
) -> Reconciliation:
    """
    Decide whether the exact IRR supersedes the AI estimate.

    Single pass, every branch ends with a usable final APR:
    1. No usable parameters      → estimate stands, no warnings
    2. Repayment < disbursement  → warning, solver skipped, estimate stands
    3. Solver fails or APR outside the plausible band → warning, estimate stands
    4. Otherwise the exact APR wins; a correction is flagged when it moves the
       estimate by more than the correction threshold
    """
    if params is None:
        return _keep_estimate(ai_estimate, None, (), _estimate_trace(ESTIMATE_EXPLANATION))

    rules = policy.reconcile
    flows = build_cash_flow(params)
    if flows is None:
        return _keep_estimate(ai_estimate, None, (), _estimate_trace(ESTIMATE_EXPLANATION))

    cash_flow_sample = describe_cash_flow(params)

    # Gate A: total repayment below net disbursement implies negative interest
    if params.total_repayment < params.net_disbursement:
        warnings = _inconsistent_schedule_warnings(params)
        trace = _estimate_trace(
            "Extracted repayment schedule is inconsistent; the AI estimate is kept for reference.",
            cash_flow_sample=cash_flow_sample,
        )
        return _keep_estimate(ai_estimate, params, warnings, trace)

    initial_guess = policy.solver.initial_guess
    if policy.solver.seed_from_schedule:
        seed = schedule_rate_guess(params)
        if seed is not None:
            initial_guess = seed

    try:
        solved = solve_irr(
            flows,
            initial_guess,
            tolerance=policy.solver.tolerance,
            max_iterations=policy.solver.max_iterations,
            divergence_bound=policy.solver.divergence_bound,
            collector=collector,
        )
        # "+ 0.0" folds a rounded -0.0 into 0.0
        exact_apr = round(solved.periodic_rate * rules.periods_per_year * 100, 2) + 0.0
    except ArithmeticError as e:
        warning = EngineWarning(
            WarningCode.CALCULATION_ERROR,
            f"Internal calculation error ({type(e).__name__}); falling back to the AI estimate.",
        )
        trace = _estimate_trace(warning.message, cash_flow_sample=cash_flow_sample)
        return _keep_estimate(ai_estimate, params, (warning,), trace)

    # Gate B: only a converged, plausible result may replace the estimate
    rejection = _reject_result(solved, exact_apr, rules)
    if rejection is not None:
        trace = _estimate_trace(
            rejection.message,
            cash_flow_sample=cash_flow_sample,
            iteration_log=solved.trace,
        )
        return _keep_estimate(ai_estimate, params, (rejection,), trace, solved.status)

    final_apr = exact_apr
    difference = round(final_apr - ai_estimate, 2)
    correction_applied = abs(difference) > rules.correction_threshold

    trace = CalculationTrace(
        formula=_npv_formula(params),
        cash_flow_sample=cash_flow_sample,
        iteration_log=solved.trace,
        explanation=_exact_explanation(params, solved, final_apr, ai_estimate, difference, rules),
    )
    return Reconciliation(
        final_apr=final_apr,
        verification=ExactVerification(
            extracted_params=params,
            correction_applied=correction_applied,
        ),
        trace=trace,
        solver_status=solved.status,
    )


def _keep_estimate(
    ai_estimate: float,
    params: Optional[LoanParameters],
    warnings: Tuple[EngineWarning, ...],
    trace: CalculationTrace,
    solver_status: Optional[SolverStatus] = None,
) -> Reconciliation:
    return Reconciliation(
        final_apr=ai_estimate,
        verification=EstimateVerification(extracted_params=params, warnings=tuple(warnings)),
        trace=trace,
        solver_status=solver_status,
    )


def _estimate_trace(
    explanation: str,
    cash_flow_sample: str = "N/A",
    iteration_log: Tuple[str, ...] = (),
) -> CalculationTrace:
    return CalculationTrace(
        formula=ESTIMATE_FORMULA,
        cash_flow_sample=cash_flow_sample,
        iteration_log=iteration_log,
        explanation=explanation,
    )


def _inconsistent_schedule_warnings(params: LoanParameters) -> Tuple[EngineWarning, ...]:
    code = WarningCode.INCONSISTENT_SCHEDULE
    return (
        EngineWarning(
            code,
            f"Data anomaly: total repayment ({format_amount(params.total_repayment)}) is less than "
            f"the cash actually received ({format_amount(params.net_disbursement)}).",
        ),
        EngineWarning(
            code,
            "Likely causes: 1. the per-period amount was read as interest only; "
            "2. a balloon payment at the end was missed; 3. the number of periods was misread.",
        ),
        EngineWarning(
            code,
            "Algorithmic verification paused; the AI estimate is kept for reference.",
        ),
    )


def _reject_result(solved: SolverResult, exact_apr: float, rules: ReconcilePolicy) -> Optional[EngineWarning]:
    """Warning explaining why the solved APR cannot be trusted, or None"""
    if not solved.converged:
        return EngineWarning(
            WarningCode.SOLVER_NOT_CONVERGED,
            f"Algorithm did not converge (status {solved.status.value} after "
            f"{solved.iterations} iterations); the AI estimate is kept.",
        )
    if math.isnan(exact_apr) or not (rules.min_plausible_apr <= exact_apr < rules.max_plausible_apr):
        shown = "NaN" if math.isnan(exact_apr) else format_percent(exact_apr)
        return EngineWarning(
            WarningCode.OUT_OF_RANGE_RESULT,
            f"Algorithm anomaly: the computed APR ({shown}) is outside the plausible range; "
            "the input parameters are probably far off. The AI estimate is kept.",
        )
    return None


def _npv_formula(params: LoanParameters) -> str:
    return (
        f"NPV = {format_amount(params.net_disbursement)} - "
        f"Σ ({format_amount(params.payment)} / (1 + r)^t) = 0, t = 1..{params.term}"
    )


def _variance_note(final_apr: float, ai_estimate: float, difference: float, rules: ReconcilePolicy) -> str:
    gap = abs(difference)
    if gap > rules.significant_divergence_threshold:
        return (
            f"[Cross-validation] Warning: the algorithmic APR ({format_percent(final_apr)}) differs "
            f"substantially from the AI estimate ({format_percent(ai_estimate)}), "
            f"a gap of {format_signed(difference)} points.\n"
            "The algorithmic result is usually more accurate because it is computed from the "
            "actual repayment schedule.\n"
            "The AI most likely underestimated the effect of compounding or fees."
        )
    if gap > rules.correction_threshold:
        return (
            f"[Cross-validation] Corrected: AI estimate {format_percent(ai_estimate)} replaced by the "
            f"exact value {format_percent(final_apr)} ({format_signed(difference)} points)."
        )
    if gap > rules.variance_note_threshold:
        return (
            f"[Cross-validation] Deviation: AI estimate {format_percent(ai_estimate)} "
            f"vs exact value {format_percent(final_apr)}."
        )
    return ""


def _exact_explanation(
    params: LoanParameters,
    solved: SolverResult,
    final_apr: float,
    ai_estimate: float,
    difference: float,
    rules: ReconcilePolicy,
) -> str:
    periodic = format_percent(solved.periodic_rate * 100, 4)
    sections: List[str] = [
        "1. Data extraction:\n"
        f"   - Principal: {format_amount(params.principal)}\n"
        f"   - Upfront deduction: {format_amount(params.upfront_fees)}\n"
        f"   - Net received: {format_amount(params.net_disbursement)}\n"
        f"   - Payment per period: {format_amount(params.payment)}\n"
        f"   - Periods: {params.term}",
        "2. Algorithm:\n"
        "   - Newton-Raphson iteration solves NPV(r) = 0 for the periodic rate.\n"
        f"   - Converged after {solved.iterations} iterations: periodic rate ≈ {periodic}",
        "3. Annualization:\n"
        f"   - Real APR (IRR) = {periodic} x {rules.periods_per_year} = {format_percent(final_apr)}",
    ]
    note = _variance_note(final_apr, ai_estimate, difference, rules)
    if note:
        sections.append(note)
    return "\n\n".join(sections)
