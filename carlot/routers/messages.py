from fastapi import APIRouter, Depends

from carlot.auth.context import RequestContext, get_store, require_user, verify_public_key
from carlot.schemas.message import MessageCreate
from carlot.services.message_service import MessageService
from carlot.store.backend import BackendStore

router = APIRouter(prefix="/api/messages", tags=["messages"], dependencies=[Depends(verify_public_key)])


@router.post("", status_code=201)
async def send_message(
    message: MessageCreate,
    ctx: RequestContext = Depends(require_user),
    store: BackendStore = Depends(get_store),
):
    return {"data": await MessageService(store).send(ctx.user_id, message)}


@router.get("/unread-count")
async def unread_count(
    ctx: RequestContext = Depends(require_user),
    store: BackendStore = Depends(get_store),
):
    return {"data": {"count": await MessageService(store).unread_count(ctx.user_id)}}


@router.patch("/{message_id}/read")
async def mark_read(
    message_id: str,
    ctx: RequestContext = Depends(require_user),
    store: BackendStore = Depends(get_store),
):
    return {"data": await MessageService(store).mark_read(ctx.user_id, message_id)}
