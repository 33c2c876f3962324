"""Risk banding for a verified or estimated APR"""

from typing import Optional

from rate_truth.domain.models import RiskLevel
from rate_truth.domain.policy import RiskPolicy


def classify_risk(
    final_apr: float,
    nominal_apr: Optional[float] = None,
    policy: RiskPolicy = RiskPolicy(),
) -> RiskLevel:
    """
    Map an APR (percent) to a consumer risk band.

    Bands (default policy):
    - LOW:    < 10%  (bank loans, mortgages)
    - MEDIUM: 10% - 24%  (credit cards, standard consumer loans)
    - HIGH:   24% - 36%  (high-interest cash loans)
    - SCAM:   > 36%, or the advertised rate understates the real APR by more
              than misleading_gap points (e.g. advertised 7%, real 30%)
    """
    if nominal_apr is not None and nominal_apr > 0:
        if final_apr - nominal_apr > policy.misleading_gap:
            return RiskLevel.SCAM

    if final_apr < policy.low_ceiling:
        return RiskLevel.LOW
    elif final_apr < policy.medium_ceiling:
        return RiskLevel.MEDIUM
    elif final_apr <= policy.high_ceiling:
        return RiskLevel.HIGH
    else:
        return RiskLevel.SCAM
