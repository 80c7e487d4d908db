# Overview: Entity store for the clients collection.

from __future__ import annotations

from .entity_store import EntityStore, StoreMessages


class ClientStore(EntityStore):
    COLLECTION = "clients"
    SEARCH_FIELD = "name"
    MESSAGES = StoreMessages(
        fetch="Failed to fetch clients",
        add="Failed to add client",
        update="Failed to update client",
        delete="Failed to delete client",
        search="Failed to search clients",
    )
