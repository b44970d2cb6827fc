"""Reference directory for users and documents.

Users and documents are owned by the embedding application. The
lifecycle service consults a directory, when one is configured, to
reject notifications pointing at unknown users or documents.
"""

import threading
from typing import Dict, Optional, Protocol

from modules.notifications.models import DocumentRef, UserRef


class ReferenceDirectory(Protocol):
    def get_user(self, user_id: str) -> Optional[UserRef]:
        ...

    def get_document(self, document_id: str) -> Optional[DocumentRef]:
        ...


class InMemoryReferenceDirectory:
    """Directory backed by dictionaries, filled by the embedding application."""

    def __init__(self):
        self._users: Dict[str, UserRef] = {}
        self._documents: Dict[str, DocumentRef] = {}
        self._lock = threading.Lock()

    def add_user(self, user: UserRef) -> None:
        with self._lock:
            self._users[user.id] = user

    def add_document(self, document: DocumentRef) -> None:
        with self._lock:
            self._documents[document.id] = document

    def get_user(self, user_id: str) -> Optional[UserRef]:
        with self._lock:
            return self._users.get(user_id)

    def get_document(self, document_id: str) -> Optional[DocumentRef]:
        with self._lock:
            return self._documents.get(document_id)
