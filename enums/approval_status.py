from enum import Enum


class ApprovalStatus(str, Enum):
    """
    Vendor verification status managed by admins.

    PENDING: Registered, waiting for admin review
    VERIFIED: Approved by an admin, may receive orders
    REJECTED: Denied by an admin (rejection reason stored on the vendor)
    """
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
