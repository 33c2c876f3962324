"""POST /v1/analysis - cross-validate an AI-estimated APR"""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Request

from rate_truth.api.dependencies import get_engine_policy, get_request_id
from rate_truth.api.v1.schemas import AnalysisRequest, AnalysisResponse
from rate_truth.domain.analysis import analyze_offer
from rate_truth.domain.policy import EnginePolicy
from rate_truth.infrastructure.observability.logging import log_analysis
from rate_truth.infrastructure.observability.metrics import record_analysis, record_solver_run

router = APIRouter()


@router.post("/analysis", response_model=AnalysisResponse)
def create_analysis(
    request_body: AnalysisRequest,
    request: Request,
    policy: EnginePolicy = Depends(get_engine_policy),
):
    """
    Verify the AI's APR against the exact IRR of the extracted schedule.

    Flow:
    1. Annualize the advertised rate claim (resolving unit ambiguity)
    2. Validate extracted loan parameters
    3. Solve IRR and reconcile with the AI estimate
    4. Return the final APR with verification record and audit trail
    """
    start_time = time.time()
    request_id = get_request_id(request)

    raw_params = (
        request_body.extracted_params.model_dump()
        if request_body.extracted_params is not None
        else None
    )
    rate_claim = request_body.rate_claim.to_domain() if request_body.rate_claim is not None else None

    try:
        result = analyze_offer(
            request_body.ai_estimated_apr,
            raw_params=raw_params,
            rate_claim=rate_claim,
            policy=policy,
        )
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    # Record metrics and logs
    duration_ms = (time.time() - start_time) * 1000
    record_analysis(result)
    if result.solver_status is not None:
        record_solver_run(result.solver_status)
    log_analysis(
        request_id,
        result.verification.method.value,
        result.final_apr,
        result.ai_estimated_apr,
        result.verification.correction_applied,
        [w.code.value for w in result.verification.warnings],
        duration_ms,
    )

    return AnalysisResponse.from_domain(result)
