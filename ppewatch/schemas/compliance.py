"""
Compliance percentage schemas.
"""

from ppewatch.schemas.base import CamelModel


class ComplianceData(CamelModel):
    """Compliance percentages (0-100) per PPE item and overall."""
    overall: float = 0.0
    hard_hat: float = 0.0
    vest: float = 0.0
    safety_glasses: float = 0.0
    gloves: float = 0.0
    ear_protection: float = 0.0
    steel_toe_boots: float = 0.0
    respiratory_mask: float = 0.0


class ComplianceCount(CamelModel):
    """Number of compliance records matching a query."""
    count: int = 0
