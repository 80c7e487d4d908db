# Overview: Explicit view/edit state machine for entity detail screens.

from __future__ import annotations

from enum import Enum

from .entity_store import EntityStore


class ViewMode(str, Enum):
    VIEWING = "VIEWING"
    EDITING = "EDITING"


class ViewStateError(Exception):
    """Raised for a transition the current mode does not allow."""


class DetailView:
    """
    Detail screen for one record of an entity store.

    VIEWING --begin_edit--> EDITING
    EDITING --cancel_edit--> VIEWING
    EDITING --save (ok)--> VIEWING
    EDITING --save (store error)--> EDITING
    delete() is only offered while VIEWING.
    """

    def __init__(self, store: EntityStore, doc_id):
        self.store = store
        self.doc_id = doc_id
        self.mode = ViewMode.VIEWING

    @property
    def record(self) -> dict | None:
        return self.store.find(self.doc_id)

    @property
    def error(self) -> str | None:
        return self.store.error

    def _require(self, mode: ViewMode, action: str) -> None:
        if self.mode is not mode:
            raise ViewStateError(f"Cannot {action} while {self.mode.value}")

    def begin_edit(self) -> None:
        self._require(ViewMode.VIEWING, "begin editing")
        self.mode = ViewMode.EDITING

    def cancel_edit(self) -> None:
        self._require(ViewMode.EDITING, "cancel editing")
        self.mode = ViewMode.VIEWING

    def save(self, patch: dict) -> bool:
        self._require(ViewMode.EDITING, "save")
        self.store.update(self.doc_id, patch)
        if self.store.error:
            return False
        self.mode = ViewMode.VIEWING
        return True

    def delete(self) -> bool:
        self._require(ViewMode.VIEWING, "delete")
        self.store.delete(self.doc_id)
        return self.store.error is None
