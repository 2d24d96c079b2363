from salon_admin.remote.base import RemoteAppointmentService, RemoteSeatService
from salon_admin.remote.http_client import SalonApiClient
from salon_admin.remote.memory import InMemorySalonService, RecordedCall

__all__ = [
    "InMemorySalonService",
    "RecordedCall",
    "RemoteAppointmentService",
    "RemoteSeatService",
    "SalonApiClient",
]
