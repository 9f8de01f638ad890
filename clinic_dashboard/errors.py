"""Error kinds raised at the repository, webhook and action boundaries."""


class DashboardError(Exception):
    pass


class FetchFailed(DashboardError):
    """The appointment store could not be read."""


class NotificationFailed(DashboardError):
    """A webhook delivery failed. Logged only."""


class ActionError(DashboardError):
    pass


class PersistenceFailed(ActionError):
    """The status update was not stored; the working set has been reloaded."""


class UnknownAppointment(ActionError):
    pass


class AmbiguousSelector(ActionError):
    """More than one scheduled appointment shares the (name, date, time) triple."""
