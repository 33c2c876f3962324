"""Domain models - immutable value objects for one rate analysis"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


class RateUnit(str, Enum):
    """Period unit a nominal rate was advertised in"""

    DAY = "DAY"
    MONTH = "MONTH"
    YEAR = "YEAR"
    UNKNOWN = "UNKNOWN"


class SolverStatus(str, Enum):
    """Terminal state of the IRR root finder"""

    CONVERGED = "CONVERGED"
    DIVERGED = "DIVERGED"
    STALLED = "STALLED"
    MAX_ITER = "MAX_ITER"


class VerificationMethod(str, Enum):
    """Where the final APR came from"""

    ESTIMATE = "ESTIMATE"
    EXACT = "EXACT"


class WarningCode(str, Enum):
    """Machine-readable reason attached to every engine warning"""

    INCONSISTENT_SCHEDULE = "INCONSISTENT_SCHEDULE"
    SOLVER_NOT_CONVERGED = "SOLVER_NOT_CONVERGED"
    OUT_OF_RANGE_RESULT = "OUT_OF_RANGE_RESULT"
    CALCULATION_ERROR = "CALCULATION_ERROR"


class RiskLevel(str, Enum):
    """Consumer-facing risk band for the final APR"""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    SCAM = "SCAM"


@dataclass(frozen=True)
class LoanParameters:
    """Loan terms extracted from an offer, already checked for usability"""

    principal: float
    term: int
    payment: float
    upfront_fees: float = 0.0

    @property
    def net_disbursement(self) -> float:
        """Cash the borrower actually receives"""
        return self.principal - self.upfront_fees

    @property
    def total_repayment(self) -> float:
        return self.payment * self.term


# Index 0 is the net disbursement (inflow), 1..term are repayments (outflows)
CashFlow = Tuple[float, ...]


@dataclass(frozen=True)
class RateClaim:
    """A rate as advertised, in whatever unit the lender chose"""

    value: float
    unit: RateUnit = RateUnit.UNKNOWN


@dataclass(frozen=True)
class RateNormalization:
    """Annualized claim plus the record of any unit inference"""

    original: RateClaim
    annualized: RateClaim
    inferred_unit: Optional[RateUnit] = None
    note: Optional[str] = None

    @property
    def was_inferred(self) -> bool:
        return self.inferred_unit is not None


@dataclass(frozen=True)
class SolverResult:
    """Output of the Newton-Raphson IRR solver"""

    periodic_rate: float
    status: SolverStatus
    iterations: int
    trace: Tuple[str, ...] = ()

    @property
    def converged(self) -> bool:
        return self.status is SolverStatus.CONVERGED


@dataclass(frozen=True)
class EngineWarning:
    """Structured warning returned to the caller instead of printed"""

    code: WarningCode
    message: str


@dataclass(frozen=True)
class EstimateVerification:
    """The externally supplied estimate stands; nothing was proven"""

    extracted_params: Optional[LoanParameters] = None
    warnings: Tuple[EngineWarning, ...] = ()

    is_verified = False
    method = VerificationMethod.ESTIMATE
    correction_applied = False


@dataclass(frozen=True)
class ExactVerification:
    """The solved APR replaced the estimate"""

    extracted_params: LoanParameters
    correction_applied: bool = False
    warnings: Tuple[EngineWarning, ...] = ()

    is_verified = True
    method = VerificationMethod.EXACT


Verification = Union[EstimateVerification, ExactVerification]


@dataclass(frozen=True)
class CalculationTrace:
    """Human-readable audit trail; never consumed by engine logic"""

    formula: str
    cash_flow_sample: str
    explanation: str
    iteration_log: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Reconciliation:
    """Output of cross-validating the estimate against the exact solve"""

    final_apr: float
    verification: Verification
    trace: CalculationTrace
    solver_status: Optional[SolverStatus] = None


@dataclass(frozen=True)
class OfferAnalysis:
    """Complete engine response for one loan offer"""

    final_apr: float
    ai_estimated_apr: float
    risk_level: RiskLevel
    verification: Verification
    calculation_details: CalculationTrace
    nominal_rate: Optional[RateNormalization] = None
    solver_status: Optional[SolverStatus] = None
