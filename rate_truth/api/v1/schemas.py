"""Pydantic schemas for API request/response validation"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from rate_truth.domain.models import (
    CalculationTrace,
    LoanParameters,
    OfferAnalysis,
    RateClaim,
    RateNormalization,
    RateUnit,
    RiskLevel,
    SolverStatus,
    VerificationMethod,
    WarningCode,
)


class ExtractedParamsSchema(BaseModel):
    """Loan terms as read by the AI; untrusted, validated by the engine"""

    model_config = ConfigDict(populate_by_name=True)

    principal: Optional[float] = Field(None, description="Amount nominally borrowed")
    term: Optional[float] = Field(None, description="Number of monthly repayment periods")
    payment: Optional[float] = Field(None, description="Amount paid per period")
    upfront_fees: Optional[float] = Field(
        0.0, alias="upfrontFees", description="Amount withheld before disbursement"
    )


class RateClaimSchema(BaseModel):
    """Advertised rate and the period unit it was stated in"""

    value: float = Field(..., allow_inf_nan=False)
    unit: RateUnit = RateUnit.UNKNOWN

    def to_domain(self) -> RateClaim:
        return RateClaim(value=self.value, unit=self.unit)

    @classmethod
    def from_domain(cls, claim: RateClaim) -> "RateClaimSchema":
        return cls(value=claim.value, unit=claim.unit)


class AnalysisRequest(BaseModel):
    """Request body for POST /v1/analysis"""

    ai_estimated_apr: float = Field(..., allow_inf_nan=False, description="APR (percent) estimated by the AI")
    extracted_params: Optional[ExtractedParamsSchema] = None
    rate_claim: Optional[RateClaimSchema] = None


class LoanParametersSchema(BaseModel):
    principal: float
    term: int
    payment: float
    upfront_fees: float
    net_disbursement: float

    @classmethod
    def from_domain(cls, params: LoanParameters) -> "LoanParametersSchema":
        return cls(
            principal=params.principal,
            term=params.term,
            payment=params.payment,
            upfront_fees=params.upfront_fees,
            net_disbursement=params.net_disbursement,
        )


class WarningSchema(BaseModel):
    code: WarningCode
    message: str


class VerificationSchema(BaseModel):
    is_verified: bool
    method: VerificationMethod
    correction_applied: bool
    extracted_params: Optional[LoanParametersSchema] = None
    warnings: List[WarningSchema] = []


class CalculationDetailsSchema(BaseModel):
    formula: str
    cash_flow_sample: str
    iteration_log: List[str]
    explanation: str

    @classmethod
    def from_domain(cls, trace: CalculationTrace) -> "CalculationDetailsSchema":
        return cls(
            formula=trace.formula,
            cash_flow_sample=trace.cash_flow_sample,
            iteration_log=list(trace.iteration_log),
            explanation=trace.explanation,
        )


class NominalRateSchema(BaseModel):
    """Advertised rate before and after annualization"""

    original: RateClaimSchema
    annualized: RateClaimSchema
    inferred_unit: Optional[RateUnit] = None
    note: Optional[str] = None

    @classmethod
    def from_domain(cls, normalization: RateNormalization) -> "NominalRateSchema":
        return cls(
            original=RateClaimSchema.from_domain(normalization.original),
            annualized=RateClaimSchema.from_domain(normalization.annualized),
            inferred_unit=normalization.inferred_unit,
            note=normalization.note,
        )


class AnalysisResponse(BaseModel):
    """Response for POST /v1/analysis"""

    final_apr: float
    ai_estimated_apr: float
    risk_level: RiskLevel
    nominal_rate: Optional[NominalRateSchema] = None
    verification: VerificationSchema
    calculation_details: CalculationDetailsSchema

    @classmethod
    def from_domain(cls, analysis: OfferAnalysis) -> "AnalysisResponse":
        verification = analysis.verification
        params = verification.extracted_params
        return cls(
            final_apr=analysis.final_apr,
            ai_estimated_apr=analysis.ai_estimated_apr,
            risk_level=analysis.risk_level,
            nominal_rate=(
                NominalRateSchema.from_domain(analysis.nominal_rate)
                if analysis.nominal_rate is not None
                else None
            ),
            verification=VerificationSchema(
                is_verified=verification.is_verified,
                method=verification.method,
                correction_applied=verification.correction_applied,
                extracted_params=LoanParametersSchema.from_domain(params) if params else None,
                warnings=[WarningSchema(code=w.code, message=w.message) for w in verification.warnings],
            ),
            calculation_details=CalculationDetailsSchema.from_domain(analysis.calculation_details),
        )


class IRRRequest(BaseModel):
    """Request body for POST /v1/irr"""

    cash_flows: List[float] = Field(..., min_length=2, description="Signed cash flows, T0 first")
    initial_guess: float = Field(0.10, gt=-1.0, description="Starting periodic rate")
    include_trace: bool = True


class IRRResponse(BaseModel):
    """Response for POST /v1/irr"""

    periodic_rate: float
    status: SolverStatus
    iterations: int
    trace: List[str]


class AnnualizeRequest(BaseModel):
    """Request body for POST /v1/rates/annualize"""

    value: float = Field(..., allow_inf_nan=False)
    unit: RateUnit = RateUnit.UNKNOWN
    corroborating_apr: Optional[float] = Field(None, description="Estimated real APR used to resolve the unit")
