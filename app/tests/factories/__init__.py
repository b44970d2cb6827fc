"""Test data factories for deterministic test data generation."""

from tests.factories.notifications import (
    make_document,
    make_notification,
    make_preference,
    make_user,
)

__all__ = [
    "make_document",
    "make_notification",
    "make_preference",
    "make_user",
]
