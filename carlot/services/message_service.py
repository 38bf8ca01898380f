from typing import Any, Dict

from carlot.core.metrics import track_performance
from carlot.exceptions import BackendError, ForbiddenError, NotFoundError
from carlot.schemas.message import MessageCreate
from carlot.store.backend import BackendStore, StoreError
from carlot.store.filters import eq


def unread_criteria(user_id: str) -> Dict[str, Any]:
    return {"receiver_id": user_id, "read": False}


class MessageService:
    def __init__(self, store: BackendStore):
        self.store = store

    @track_performance(service_name="MessageService")
    async def send(self, sender_id: str, message: MessageCreate) -> Dict[str, Any]:
        try:
            return await self.store.insert(
                "messages",
                {"sender_id": sender_id, "receiver_id": message.receiver_id, "content": message.content},
            )
        except StoreError as e:
            raise BackendError("Failed to send message") from e

    @track_performance(service_name="MessageService")
    async def unread_count(self, user_id: str) -> int:
        try:
            return await self.store.count("messages", [eq(k, v) for k, v in unread_criteria(user_id).items()])
        except StoreError as e:
            raise BackendError("Failed to fetch unread count") from e

    @track_performance(service_name="MessageService")
    async def mark_read(self, user_id: str, message_id: str) -> Dict[str, Any]:
        try:
            message = await self.store.get("messages", message_id)
        except StoreError as e:
            raise BackendError("Failed to update message") from e
        if message is None:
            raise NotFoundError("Message not found")
        if message["receiver_id"] != user_id:
            raise ForbiddenError("Only the receiver can mark a message as read")
        if message["read"]:
            return message
        try:
            return await self.store.update("messages", message_id, {"read": True})
        except StoreError as e:
            raise BackendError("Failed to update message") from e
