"""Cash flow construction from extracted loan parameters"""

import math
from typing import Any, Mapping, Optional

from rate_truth.domain.models import CashFlow, LoanParameters
from rate_truth.utils.formatting import format_amount

DEFAULT_MAX_TERM = 1200  # 100 years of monthly periods


def _finite_number(value: Any) -> Optional[float]:
    """Coerce an untrusted scalar to a finite float, or None"""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_loan_parameters(
    raw: Optional[Mapping[str, Any]],
    max_term: int = DEFAULT_MAX_TERM,
) -> Optional[LoanParameters]:
    """
    Turn the collaborator's untrusted parameter mapping into LoanParameters.

    Accepts snake_case or camelCase keys. Returns None (unusable) when:
    - the mapping is missing
    - principal, term or payment is missing, non-numeric, non-finite or <= 0
    - term is not a whole number or exceeds max_term
    - upfront fees are negative
    """
    if not raw:
        return None

    principal = _finite_number(raw.get("principal"))
    term = _finite_number(raw.get("term"))
    payment = _finite_number(raw.get("payment"))
    fees_raw = raw.get("upfront_fees", raw.get("upfrontFees"))
    upfront_fees = 0.0 if fees_raw is None else _finite_number(fees_raw)

    if principal is None or term is None or payment is None or upfront_fees is None:
        return None
    if not term.is_integer() or term > max_term:
        return None

    params = LoanParameters(
        principal=principal,
        term=int(term),
        payment=payment,
        upfront_fees=upfront_fees,
    )
    return params if is_usable(params) else None


def is_usable(params: Optional[LoanParameters]) -> bool:
    """principal, term and payment must all be positive; fees non-negative"""
    if params is None:
        return False
    return (
        params.principal > 0
        and params.term > 0
        and params.payment > 0
        and params.upfront_fees >= 0
    )


def build_cash_flow(params: Optional[LoanParameters]) -> Optional[CashFlow]:
    """
    Build the borrower-side cash flow: net disbursement first, then equal outflows.

    Example:
        principal=10000, upfront_fees=1500, term=3, payment=3000
        → (8500.0, -3000.0, -3000.0, -3000.0)

    Returns None when the parameters are not usable.
    """
    if not is_usable(params):
        return None

    return (params.net_disbursement,) + (-params.payment,) * params.term


def describe_cash_flow(params: LoanParameters) -> str:
    """Literal cash flow sample for the audit trail"""
    net = format_amount(params.net_disbursement)
    payment = format_amount(params.payment)
    if params.term == 1:
        return f"T0 (borrowed): +{net}\nT1 (repayment): -{payment}"
    return f"T0 (borrowed): +{net}\nT1 - T{params.term} (repayment): -{payment}"


def schedule_rate_guess(params: LoanParameters) -> Optional[float]:
    """
    Flat per-period rate implied by the schedule: total interest over net
    disbursement, spread evenly across the term.

    The borrower-side NPV is increasing and concave in the rate, and the flat
    rate never exceeds the true periodic rate, so Newton-Raphson started here
    approaches the root from below without overshooting. Returns None when
    nothing was disbursed.
    """
    if params.net_disbursement <= 0:
        return None
    return (params.total_repayment / params.net_disbursement - 1.0) / params.term
