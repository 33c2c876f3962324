"""Unit tests for estimate vs exact reconciliation"""

import pytest

from rate_truth.domain import reconciler
from rate_truth.domain.models import (
    EstimateVerification,
    ExactVerification,
    LoanParameters,
    SolverStatus,
    VerificationMethod,
    WarningCode,
)
from rate_truth.domain.policy import EnginePolicy, ReconcilePolicy, SolverPolicy
from rate_truth.domain.reconciler import reconcile


def test_reconcile_unusable_params_keeps_estimate():
    """Test missing parameters leave the AI estimate untouched, without warnings"""
    result = reconcile(24.5, None)

    assert result.final_apr == 24.5
    assert isinstance(result.verification, EstimateVerification)
    assert result.verification.is_verified is False
    assert result.verification.method is VerificationMethod.ESTIMATE
    assert result.verification.warnings == ()
    assert result.trace.cash_flow_sample == "N/A"
    assert result.trace.iteration_log == ()


def test_reconcile_inconsistent_schedule_skips_solver(monkeypatch):
    """Repayment below net disbursement never reaches the solver"""

    def fail_solver(*args, **kwargs):
        raise AssertionError("solver must not run for an inconsistent schedule")

    monkeypatch.setattr(reconciler, "solve_irr", fail_solver)
    params = LoanParameters(principal=10000, term=12, payment=500)

    result = reconcile(35.0, params)

    assert result.final_apr == 35.0
    assert result.verification.is_verified is False
    assert len(result.verification.warnings) >= 1
    assert all(w.code is WarningCode.INCONSISTENT_SCHEDULE for w in result.verification.warnings)
    assert "6,000" in result.verification.warnings[0].message
    assert "balloon" in result.verification.warnings[1].message


def test_reconcile_upfront_fee_loan(upfront_fee_loan: LoanParameters):
    """Upfront fees push the exact APR well above the naive figure"""
    naive_apr = (900 * 12 - 8500) / 8500 * 100  # ≈ 27.06%

    result = reconcile(naive_apr, upfront_fee_loan)

    assert isinstance(result.verification, ExactVerification)
    assert result.verification.is_verified is True
    assert result.verification.method is VerificationMethod.EXACT
    assert result.final_apr > naive_apr
    assert 45.0 < result.final_apr < 48.0
    assert result.verification.correction_applied is True
    assert result.verification.warnings == ()


def test_reconcile_trace_contents(upfront_fee_loan: LoanParameters):
    """Test audit trail is literal and complete"""
    result = reconcile(27.06, upfront_fee_loan)
    trace = result.trace

    assert trace.formula == "NPV = 8,500 - Σ (900 / (1 + r)^t) = 0, t = 1..12"
    assert trace.cash_flow_sample == "T0 (borrowed): +8,500\nT1 - T12 (repayment): -900"
    assert trace.iteration_log[0].startswith("[INIT]")
    assert "Net received: 8,500" in trace.explanation
    assert "x 12 =" in trace.explanation
    assert f"{result.final_apr:.2f}%" in trace.explanation
    assert "[Cross-validation] Warning" in trace.explanation


def test_reconcile_matching_estimate_no_correction(fair_loan: LoanParameters):
    """Test an accurate estimate is confirmed without a correction note"""
    result = reconcile(12.0, fair_loan)

    assert result.verification.is_verified is True
    assert result.final_apr == pytest.approx(12.0, abs=0.01)
    assert result.verification.correction_applied is False
    assert "[Cross-validation]" not in result.trace.explanation


def test_reconcile_moderate_gap_is_corrected(fair_loan: LoanParameters):
    """A 2-point gap is a correction but not a significant divergence"""
    result = reconcile(10.0, fair_loan)

    assert result.verification.correction_applied is True
    assert "[Cross-validation] Corrected" in result.trace.explanation


def test_reconcile_small_gap_noted_without_correction(fair_loan: LoanParameters):
    """Test gaps under the correction threshold only get a deviation note"""
    result = reconcile(11.5, fair_loan)

    assert result.verification.correction_applied is False
    assert "[Cross-validation] Deviation" in result.trace.explanation


def test_reconcile_zero_interest_loan():
    """Interest-free instalments verify at exactly 0%"""
    params = LoanParameters(principal=1200, term=12, payment=100)

    result = reconcile(0.0, params)

    assert result.verification.is_verified is True
    assert result.final_apr == 0.0


def test_reconcile_out_of_range_result_keeps_estimate():
    """A 2,900% periodic rate annualizes far outside the plausible band"""
    params = LoanParameters(principal=1000, term=1, payment=30000)

    result = reconcile(400.0, params)

    assert result.final_apr == 400.0
    assert result.verification.is_verified is False
    assert [w.code for w in result.verification.warnings] == [WarningCode.OUT_OF_RANGE_RESULT]
    assert result.trace.iteration_log


def test_reconcile_non_converged_solver_keeps_estimate(upfront_fee_loan: LoanParameters):
    """Test MAX_ITER is treated as untrustworthy"""
    policy = EnginePolicy(solver=SolverPolicy(max_iterations=1))

    result = reconcile(30.0, upfront_fee_loan, policy)

    assert result.final_apr == 30.0
    assert result.verification.method is VerificationMethod.ESTIMATE
    assert [w.code for w in result.verification.warnings] == [WarningCode.SOLVER_NOT_CONVERGED]
    assert "MAX_ITER" in result.verification.warnings[0].message


def test_reconcile_custom_periods_per_year():
    """Test annualization uses the configured periods per year"""
    params = LoanParameters(principal=1000, term=1, payment=1010)
    policy = EnginePolicy(reconcile=ReconcilePolicy(periods_per_year=4))

    result = reconcile(4.0, params, policy)

    assert result.final_apr == pytest.approx(4.0, abs=0.01)
    assert "x 4 =" in result.trace.explanation


def test_reconcile_is_repeatable(upfront_fee_loan: LoanParameters):
    """Test no state leaks between calls"""
    assert reconcile(27.06, upfront_fee_loan) == reconcile(27.06, upfront_fee_loan)


def test_reconcile_long_mortgage_verifies():
    """A 30-year 4% mortgage converges from the schedule seed"""
    params = LoanParameters(principal=200000, term=360, payment=954.83)

    result = reconcile(10.0, params)

    assert result.verification.is_verified is True
    assert result.final_apr == pytest.approx(4.0, abs=0.05)
    assert result.solver_status is SolverStatus.CONVERGED


@pytest.mark.parametrize(
    "params,low,high",
    [
        (LoanParameters(principal=12000, term=120, payment=127), 4.5, 5.5),
        (LoanParameters(principal=300000, term=240, payment=1818), 3.0, 6.0),
    ],
)
def test_reconcile_long_terms_verify(params: LoanParameters, low: float, high: float):
    """Test long low-rate schedules are verified rather than left as estimates"""
    result = reconcile(20.0, params)

    assert result.verification.method is VerificationMethod.EXACT
    assert low <= result.final_apr <= high


def test_reconcile_fixed_initial_guess_when_seeding_disabled(upfront_fee_loan: LoanParameters):
    """Test the configured initial guess is used when schedule seeding is off"""
    policy = EnginePolicy(solver=SolverPolicy(initial_guess=0.05, seed_from_schedule=False))

    result = reconcile(27.06, upfront_fee_loan, policy)

    assert result.trace.iteration_log[0] == "[INIT] Initial periodic rate guess: 5.0000%"
    assert result.verification.is_verified is True


def test_reconcile_reports_solver_status(upfront_fee_loan: LoanParameters):
    """Test the solver end state is carried on every solved path"""
    assert reconcile(27.06, upfront_fee_loan).solver_status is SolverStatus.CONVERGED

    capped = reconcile(30.0, upfront_fee_loan, EnginePolicy(solver=SolverPolicy(max_iterations=1)))
    assert capped.solver_status is SolverStatus.MAX_ITER

    assert reconcile(30.0, None).solver_status is None
