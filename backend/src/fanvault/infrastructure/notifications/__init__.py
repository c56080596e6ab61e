from .db_notifier import DatabaseNotifier

__all__ = ["DatabaseNotifier"]
