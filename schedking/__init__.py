"""schedking - automated booking client for a Schedule King style scheduling portal."""

__version__ = "0.3.0"
__license__ = "MIT"

from .services.portal import Appointment, FilterForm, Scheduler, UserIdentity

__all__ = ["Scheduler", "FilterForm", "Appointment", "UserIdentity", "__version__"]
