"""Ports the application layer needs from infrastructure."""

from sso_identity.application.ports.notifier import Notifier

__all__ = ["Notifier"]
