"""Unit tests for the Newton-Raphson IRR solver"""

import math

import pytest

from rate_truth.domain.exceptions import InvalidCashFlowError
from rate_truth.domain.irr import (
    ListTraceCollector,
    NullTraceCollector,
    npv,
    npv_derivative,
    solve_irr,
)
from rate_truth.domain.models import SolverStatus


def test_npv_at_zero_rate_is_plain_sum():
    """Test NPV with no discounting"""
    assert npv(0.0, [1000, -300, -300, -300]) == pytest.approx(100.0)


def test_npv_derivative_matches_finite_difference():
    """Test analytic derivative against a central difference"""
    flows = [8500, -900, -900, -900, -900]
    h = 1e-6
    numeric = (npv(0.05 + h, flows) - npv(0.05 - h, flows)) / (2 * h)
    assert npv_derivative(0.05, flows) == pytest.approx(numeric, rel=1e-5)


def test_solve_single_period_loan():
    """Borrow 1000, repay 1100 after one period → 10% per period"""
    result = solve_irr([1000, -1100])

    assert result.status is SolverStatus.CONVERGED
    assert result.periodic_rate == pytest.approx(0.10, abs=1e-4)


def test_solve_from_other_initial_guess():
    """Test convergence does not depend on starting at the answer"""
    result = solve_irr([1000, -1100], initial_guess=0.5)

    assert result.status is SolverStatus.CONVERGED
    assert result.periodic_rate == pytest.approx(0.10, abs=1e-6)


def test_solve_amortizing_loan():
    """12,000 repaid by 12 x 1,066.19 is a 1% monthly loan"""
    flows = [12000] + [-1066.19] * 12
    result = solve_irr(flows)

    assert result.status is SolverStatus.CONVERGED
    assert result.periodic_rate == pytest.approx(0.01, abs=1e-5)


def test_solve_rate_increases_with_payment():
    """Holding principal and term fixed, a larger payment means a higher rate"""
    rates = [
        solve_irr([10000] + [-payment] * 12).periodic_rate
        for payment in (850, 900, 950, 1000, 1200)
    ]

    assert all(a < b for a, b in zip(rates, rates[1:]))


def test_solve_is_deterministic():
    """Test identical input gives identical rate and trace"""
    flows = [8500] + [-900] * 12
    first = solve_irr(flows)
    second = solve_irr(flows)

    assert first.periodic_rate == second.periodic_rate
    assert first.trace == second.trace
    assert first.iterations == second.iterations


def test_solve_trace_has_one_line_per_iteration():
    """Test trace contains INIT, one ITER line per step, and a terminal line"""
    result = solve_irr([8500] + [-900] * 12)

    iteration_lines = [line for line in result.trace if line.startswith("[ITER")]
    assert result.trace[0].startswith("[INIT]")
    assert len(iteration_lines) == result.iterations
    assert result.trace[-1].startswith("[DONE]")
    assert "NPV" in iteration_lines[0]


def test_solve_with_null_collector_skips_trace():
    """Test trace collection can be switched off without changing the result"""
    flows = [8500] + [-900] * 12
    traced = solve_irr(flows)
    untraced = solve_irr(flows, collector=NullTraceCollector())

    assert untraced.trace == ()
    assert untraced.periodic_rate == traced.periodic_rate
    assert untraced.status is traced.status


def test_solve_with_injected_collector():
    """Test a caller-provided collector receives the trace"""
    collector = ListTraceCollector()
    result = solve_irr([1000, -1100], collector=collector)

    assert collector.lines() == result.trace
    assert len(collector.lines()) >= 2


def test_solve_zero_derivative_stalls():
    """A flow with nothing after T0 has a flat NPV → STALLED"""
    result = solve_irr([100.0, 0.0])

    assert result.status is SolverStatus.STALLED
    assert math.isfinite(result.periodic_rate)
    assert result.trace[-1].startswith("[FAIL]")


def test_solve_runaway_step_diverges():
    """A near-flat NPV sends the Newton step past the divergence bound"""
    result = solve_irr([1.0, 1e-9])

    assert result.status is SolverStatus.DIVERGED
    assert result.periodic_rate == pytest.approx(0.10)
    assert math.isfinite(result.periodic_rate)


def test_solve_without_sign_change_never_faults():
    """All-outflow schedule has no root; solver stops with a finite rate"""
    result = solve_irr([-100.0] + [-900.0] * 12)

    assert result.status in (SolverStatus.DIVERGED, SolverStatus.STALLED, SolverStatus.MAX_ITER)
    assert math.isfinite(result.periodic_rate)


def test_solve_iteration_budget():
    """Test MAX_ITER when the budget is too small to converge"""
    result = solve_irr([8500] + [-900] * 12, max_iterations=1)

    assert result.status is SolverStatus.MAX_ITER
    assert result.iterations == 1
    assert result.trace[-1].startswith("[STOP]")


def test_solve_empty_flows_is_contract_violation():
    """Test empty cash flow fails loudly"""
    with pytest.raises(InvalidCashFlowError):
        solve_irr([])


def test_solve_is_scale_invariant():
    """Tiny amounts converge to the same rate as the same schedule in whole units"""
    tiny = solve_irr([1e-6] + [-1e-7] * 12)
    whole = solve_irr([1000.0] + [-100.0] * 12)

    assert tiny.status is SolverStatus.CONVERGED
    assert whole.status is SolverStatus.CONVERGED
    assert tiny.periodic_rate == pytest.approx(whole.periodic_rate, abs=1e-6)
