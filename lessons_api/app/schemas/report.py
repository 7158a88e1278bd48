"""Response model for the admin reports."""

from typing import Dict

from .entity import CamelModel


class Metrics(CamelModel):
    revenue: float
    bookings: int
    by_month: Dict[str, int]
    by_subject: Dict[str, int]
    accounts: Dict[str, int]
    payments_total: float
    payments_by_month: Dict[str, float]
