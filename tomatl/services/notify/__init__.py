from .desktop_notifier import NOTIFICATION_TITLE, DesktopNotifier, NullNotifier

__all__ = ["NOTIFICATION_TITLE", "DesktopNotifier", "NullNotifier"]
