class LeasingError(Exception):
    """Base class for lease and payment lifecycle errors."""


class InvalidTransition(LeasingError):
    """The entity's current status does not allow the requested operation."""


class InvalidFrequency(LeasingError):
    """The lease has a payment frequency the schedule cannot step through."""


class MissingEndDate(LeasingError):
    """Open-ended leases cannot be renewed."""


class InvalidLeaseDates(LeasingError):
    """The requested dates would end a lease before it starts."""


class InvalidAmount(LeasingError):
    """A payment amount that is not a positive number."""


class Overpayment(LeasingError):
    """A payment larger than the outstanding balance."""


class ConcurrentModification(LeasingError):
    """The row was locked or changed by another transaction."""
