from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_session_context
from app.db.session import get_session
from app.schemas.auth import SessionContext
from app.schemas.message import MessageCreate, MessageResponse, UnreadCountResponse, VideoCallRequest, VideoRoom
from app.services.message_service import MessageService

router = APIRouter()

async def get_message_service(session: AsyncSession = Depends(get_session)) -> MessageService:
    return MessageService(session)

@router.post("/", response_model=MessageResponse, status_code=201)
async def send_message(
    data: MessageCreate,
    ctx: SessionContext = Depends(get_session_context),
    service: MessageService = Depends(get_message_service)
):
    return await service.send(ctx, data)

@router.get("/unread-count", response_model=UnreadCountResponse)
async def read_unread_count(
    ctx: SessionContext = Depends(get_session_context),
    service: MessageService = Depends(get_message_service)
):
    return UnreadCountResponse(unread=await service.unread_count(ctx))

@router.get("/conversations/{user_id}", response_model=List[MessageResponse])
async def read_conversation(
    user_id: UUID,
    limit: int = 200,
    ctx: SessionContext = Depends(get_session_context),
    service: MessageService = Depends(get_message_service)
):
    return await service.conversation(ctx, user_id, limit)

@router.post("/{message_id}/read", response_model=MessageResponse)
async def mark_message_read(
    message_id: UUID,
    ctx: SessionContext = Depends(get_session_context),
    service: MessageService = Depends(get_message_service)
):
    return await service.mark_read(ctx, message_id)

@router.post("/video-call", response_model=VideoRoom)
async def start_video_call(
    request: VideoCallRequest,
    ctx: SessionContext = Depends(get_session_context),
    service: MessageService = Depends(get_message_service)
):
    return await service.start_video_call(ctx, request.participant_id)

@router.get("/video-room/{participant_id}", response_model=VideoRoom)
async def read_video_room(
    participant_id: UUID,
    ctx: SessionContext = Depends(get_session_context),
    service: MessageService = Depends(get_message_service)
):
    return service.get_video_room(ctx, participant_id)
