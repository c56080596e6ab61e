from .object_storage_port import DurableObjectStorePort
from .notification_port import NotificationPort

__all__ = [
    "DurableObjectStorePort",
    "NotificationPort",
]
