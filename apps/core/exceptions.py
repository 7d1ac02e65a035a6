"""
Error taxonomy for the compliance engine.

Field validation uses Django's own ``ValidationError`` so form errors flow
through unchanged; everything else derives from ``ComplianceError``.
"""
from django.core.exceptions import ObjectDoesNotExist


class ComplianceError(Exception):
    pass


class NotFound(ObjectDoesNotExist):
    """A referenced vehicle or record does not exist (or is out of scope)."""


class ReconciliationFailure(ComplianceError):
    """Storage failed while recomputing a vehicle's expiry fields."""


class JobExecutionError(ComplianceError):
    def __init__(self, job_name: str, message: str, log_entry=None):
        super().__init__(f"{job_name}: {message}")
        self.job_name = job_name
        self.log_entry = log_entry


class NotificationFailure(ComplianceError):
    """The mail transport refused or failed to deliver a message."""
