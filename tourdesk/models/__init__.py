"""SQLAlchemy models for TourDesk.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from tourdesk.models.booking import Booking
from tourdesk.models.period import Period, PeriodOffer
from tourdesk.models.tour import Tour

__all__ = [
    "Booking",
    "Period",
    "PeriodOffer",
    "Tour",
]
