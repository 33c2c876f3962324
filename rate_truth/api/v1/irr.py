"""POST /v1/irr - solve the periodic IRR of an arbitrary cash flow"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from rate_truth.api.dependencies import get_engine_policy, get_request_id
from rate_truth.api.v1.schemas import IRRRequest, IRRResponse
from rate_truth.domain.exceptions import InvalidCashFlowError
from rate_truth.domain.irr import ListTraceCollector, NullTraceCollector, solve_irr
from rate_truth.domain.policy import EnginePolicy
from rate_truth.infrastructure.observability.metrics import record_solver_run

router = APIRouter()


@router.post("/irr", response_model=IRRResponse)
def calculate_irr(
    request_body: IRRRequest,
    request: Request,
    policy: EnginePolicy = Depends(get_engine_policy),
):
    """
    Run the Newton-Raphson solver on caller-supplied cash flows.

    Non-convergence is reported through `status`, not as an HTTP error.
    """
    request_id = get_request_id(request)
    collector = ListTraceCollector() if request_body.include_trace else NullTraceCollector()

    try:
        result = solve_irr(
            request_body.cash_flows,
            request_body.initial_guess,
            tolerance=policy.solver.tolerance,
            max_iterations=policy.solver.max_iterations,
            divergence_bound=policy.solver.divergence_bound,
            collector=collector,
        )
    except InvalidCashFlowError as e:
        logging.warning(f"Invalid cash flow: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    record_solver_run(result.status)

    return IRRResponse(
        periodic_rate=result.periodic_rate,
        status=result.status,
        iterations=result.iterations,
        trace=list(result.trace),
    )
