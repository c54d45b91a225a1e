from acquisition.models.base import Base  # noqa: F401

from acquisition.models.user import User  # noqa: F401
from acquisition.models.listing import Listing, ListingStatus  # noqa: F401
from acquisition.models.deal import Deal, DealStatus  # noqa: F401
from acquisition.models.audit_log import AuditLog  # noqa: F401
