"""Newton-Raphson IRR solver with an optional iteration trace"""

import math
from typing import List, Optional, Protocol, Sequence, Tuple

from rate_truth.domain.exceptions import InvalidCashFlowError
from rate_truth.domain.models import SolverResult, SolverStatus


class TraceCollector(Protocol):
    """Receives one human-readable line per solver step"""

    enabled: bool

    def record(self, line: str) -> None: ...

    def lines(self) -> Tuple[str, ...]: ...


class ListTraceCollector:
    """Keeps every trace line in memory"""

    enabled = True

    def __init__(self) -> None:
        self._lines: List[str] = []

    def record(self, line: str) -> None:
        self._lines.append(line)

    def lines(self) -> Tuple[str, ...]:
        return tuple(self._lines)


class NullTraceCollector:
    """Discards the trace; the solver skips formatting entirely"""

    enabled = False

    def record(self, line: str) -> None:
        pass

    def lines(self) -> Tuple[str, ...]:
        return ()


def npv(rate: float, flows: Sequence[float]) -> float:
    """
    Net present value at a periodic rate:
        NPV(r) = Σ_{t=0..n} CF[t] · (1+r)^(-t)
    """
    base = 1.0 + rate
    return sum(cf * base ** -t for t, cf in enumerate(flows))


def npv_derivative(rate: float, flows: Sequence[float]) -> float:
    """
    dNPV/dr:
        NPV'(r) = Σ_{t=1..n} -t · CF[t] · (1+r)^(-t-1)
    """
    base = 1.0 + rate
    return sum(-t * cf * base ** (-t - 1) for t, cf in enumerate(flows) if t > 0)


def solve_irr(
    flows: Sequence[float],
    initial_guess: float = 0.10,
    *,
    tolerance: float = 1e-7,
    max_iterations: int = 50,
    divergence_bound: float = 100.0,
    collector: Optional[TraceCollector] = None,
) -> SolverResult:
    """
    Find the periodic rate r where NPV(r) = 0 by Newton-Raphson.

    Stopping rules, checked in this order each iteration:
    - |NPV(r)| < tolerance x |T0 flow|  → CONVERGED at r
    - NPV'(r) == 0                     → STALLED at r
    - |r_next| > divergence_bound      → DIVERGED, last finite r returned
    - |r_next - r| < tolerance         → CONVERGED at r_next
    - iteration budget spent           → MAX_ITER at the last rate computed

    The rate leaving the domain (1 + r <= 0), float overflow and non-finite
    NPV values also stop with DIVERGED. Numeric trouble never raises; callers
    decide what a non-converged status means.

    Args:
        flows: Signed cash flows, index 0 first. Must not be empty.
        initial_guess: Starting periodic rate (0.10 = 10%)
        tolerance: Relative NPV tolerance (scaled by the T0 flow, or the
            largest flow when T0 is zero) and absolute step tolerance
        collector: Trace sink. Defaults to an in-memory list; pass
            NullTraceCollector() to skip trace formatting.

    Raises:
        InvalidCashFlowError: flows is empty
    """
    if not flows:
        raise InvalidCashFlowError("Cannot solve IRR for an empty cash flow")

    if collector is None:
        collector = ListTraceCollector()
    tracing = collector.enabled

    scale = abs(flows[0]) or max(abs(cf) for cf in flows) or 1.0
    npv_tolerance = tolerance * scale

    rate = float(initial_guess)
    if tracing:
        collector.record(f"[INIT] Initial periodic rate guess: {rate * 100:.4f}%")

    for i in range(max_iterations):
        if 1.0 + rate <= 0.0:
            if tracing:
                collector.record(f"[WARN] Rate {rate * 100:.6f}% is at or below -100%, stopping.")
            return _result(rate, SolverStatus.DIVERGED, i, collector)

        try:
            value = npv(rate, flows)
            slope = npv_derivative(rate, flows)
        except (OverflowError, ZeroDivisionError):
            if tracing:
                collector.record(f"[WARN] Discounting overflowed at rate {rate * 100:.6f}%, stopping.")
            return _result(rate, SolverStatus.DIVERGED, i, collector)

        if tracing:
            collector.record(
                f"[ITER {i + 1}] Rate: {rate * 100:.6f}% | NPV: {value:.4f} | NPV': {slope:.2f}"
            )

        if not (math.isfinite(value) and math.isfinite(slope)):
            if tracing:
                collector.record("[WARN] NPV is no longer finite, stopping.")
            return _result(rate, SolverStatus.DIVERGED, i + 1, collector)

        if abs(value) < npv_tolerance:
            if tracing:
                collector.record(f"[DONE] |NPV| < {npv_tolerance:g}, converged.")
            return _result(rate, SolverStatus.CONVERGED, i + 1, collector)

        if slope == 0.0:
            if tracing:
                collector.record("[FAIL] Derivative is zero, cannot continue.")
            return _result(rate, SolverStatus.STALLED, i + 1, collector)

        next_rate = rate - value / slope

        if not math.isfinite(next_rate) or abs(next_rate) > divergence_bound:
            if tracing:
                collector.record(
                    f"[WARN] Next step exceeds the divergence bound ({divergence_bound:g}), stopping."
                )
            return _result(rate, SolverStatus.DIVERGED, i + 1, collector)

        if abs(next_rate - rate) < tolerance:
            if tracing:
                collector.record(f"[DONE] Step < {tolerance:g}, converged.")
            return _result(next_rate, SolverStatus.CONVERGED, i + 1, collector)

        rate = next_rate

    if tracing:
        collector.record(f"[STOP] Reached maximum iterations ({max_iterations}).")
    return _result(rate, SolverStatus.MAX_ITER, max_iterations, collector)


def _result(rate: float, status: SolverStatus, iterations: int, collector: TraceCollector) -> SolverResult:
    return SolverResult(
        periodic_rate=rate,
        status=status,
        iterations=iterations,
        trace=collector.lines(),
    )
