"""Risk classification engine - maps delinquency signals to collection priority"""

from typing import Dict, Optional

from ecollect_gateway.domain.models import RiskAssessment, RiskLevel

CRITICAL_DPD_THRESHOLD = 90
HIGH_DPD_THRESHOLD = 30

# Status fragments that escalate straight to CRITICAL regardless of DPD
CRITICAL_STATUS_MARKERS = ("bankruptcy", "legal")

LEVEL_WEIGHTS: Dict[RiskLevel, int] = {
    RiskLevel.CRITICAL: 1000,
    RiskLevel.HIGH: 500,
    RiskLevel.LOW: 100,
}

RISK_DESCRIPTIONS: Dict[RiskLevel, str] = {
    RiskLevel.CRITICAL: "Immediate action required. Account at high risk of default or legal proceedings.",
    RiskLevel.HIGH: "Elevated risk. Proactive engagement recommended.",
    RiskLevel.LOW: "Standard monitoring. Account within acceptable parameters.",
}

BALANCE_WEIGHT_CAP = 200


def determine_risk_level(dpd: int, status: Optional[str] = None) -> RiskLevel:
    """
    Map DPD and status to a risk tier.

    Rules (first match wins):
    - CRITICAL: DPD > 90, or status mentions bankruptcy or legal
    - HIGH:     DPD > 30
    - LOW:      everything else
    """
    normalized_status = (status or "").lower()

    if dpd > CRITICAL_DPD_THRESHOLD or any(marker in normalized_status for marker in CRITICAL_STATUS_MARKERS):
        return RiskLevel.CRITICAL
    elif dpd > HIGH_DPD_THRESHOLD:
        return RiskLevel.HIGH
    else:
        return RiskLevel.LOW


def compute_priority(dpd: int, balance: float = 0, status: Optional[str] = None) -> float:
    """
    Priority score for ordering a work queue.

    Weights:
    - Risk tier base: CRITICAL 1000, HIGH 500, LOW 100
    - DPD: 2 points per day
    - Balance: 1 point per 100 of balance, capped at 200
    """
    level = determine_risk_level(dpd, status)
    score = LEVEL_WEIGHTS[level] + dpd * 2 + min((balance or 0) / 100, BALANCE_WEIGHT_CAP)
    return float(score)


def classify_risk(dpd: int, status: Optional[str] = None) -> RiskAssessment:
    """Main entry point: risk tier plus priority score for an account with unknown balance"""
    return RiskAssessment(
        level=determine_risk_level(dpd, status),
        priority_score=compute_priority(dpd, 0, status),
    )


def risk_description(level: RiskLevel) -> str:
    """Agent-facing guidance for a risk tier"""
    return RISK_DESCRIPTIONS.get(level, "Risk level unknown.")
