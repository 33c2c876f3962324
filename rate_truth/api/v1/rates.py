"""POST /v1/rates/annualize - normalize an advertised nominal rate"""

from fastapi import APIRouter, Depends

from rate_truth.api.dependencies import get_engine_policy
from rate_truth.api.v1.schemas import AnnualizeRequest, NominalRateSchema
from rate_truth.domain.models import RateClaim
from rate_truth.domain.normalizer import normalize_rate_claim
from rate_truth.domain.policy import EnginePolicy

router = APIRouter()


@router.post("/rates/annualize", response_model=NominalRateSchema)
def annualize_rate(
    request_body: AnnualizeRequest,
    policy: EnginePolicy = Depends(get_engine_policy),
):
    """
    Convert a day/month/year rate to an annual percentage.

    Returns:
        Original and annualized claims, plus the inferred unit and a note when
        the unit had to be guessed from the corroborating APR
    """
    claim = RateClaim(value=request_body.value, unit=request_body.unit)
    normalization = normalize_rate_claim(claim, request_body.corroborating_apr, policy.units)
    return NominalRateSchema.from_domain(normalization)
