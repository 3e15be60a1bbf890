from datetime import datetime
from typing import List
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import and_, func, or_, select

from app.core.redis import redis_client
from app.core.utils import video_room_name, video_room_url
from app.db.models import Message, User
from app.schemas.auth import SessionContext
from app.schemas.message import MessageCreate, VIDEO_CALL_MARKER, VideoRoom

class MessageService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def send(self, ctx: SessionContext, data: MessageCreate) -> Message:
        if data.receiver_id == ctx.user_id:
            raise HTTPException(status_code=400, detail="Cannot send a message to yourself")

        receiver = await self.session.get(User, data.receiver_id)
        if not receiver:
            raise HTTPException(status_code=404, detail="Recipient not found")
        if receiver.role == ctx.role:
            raise HTTPException(status_code=400, detail="Messages go between a doctor and a patient")

        message = Message(
            sender_id=ctx.user_id,
            receiver_id=receiver.id,
            sender_type=ctx.role,
            message=data.message
        )
        self.session.add(message)
        await self.session.commit()
        await self.session.refresh(message)

        await redis_client.publish(receiver.id, "message", {
            "id": str(message.id),
            "sender_id": str(message.sender_id),
            "sender_type": message.sender_type,
            "message": message.message,
            "created_at": message.created_at.isoformat(),
        })
        return message

    async def conversation(self, ctx: SessionContext, other_user_id: UUID, limit: int = 200) -> List[Message]:
        stmt = select(Message).where(
            or_(
                and_(Message.sender_id == ctx.user_id, Message.receiver_id == other_user_id),
                and_(Message.sender_id == other_user_id, Message.receiver_id == ctx.user_id),
            )
        ).order_by(Message.created_at.desc()).limit(limit)
        result = await self.session.execute(stmt)
        # Latest `limit` messages, oldest first
        return list(reversed(result.scalars().all()))

    async def mark_read(self, ctx: SessionContext, message_id: UUID) -> Message:
        message = await self.session.get(Message, message_id)
        if not message or message.receiver_id != ctx.user_id:
            raise HTTPException(status_code=404, detail="Message not found")

        if message.read_at is None:
            message.read_at = datetime.utcnow()
            self.session.add(message)
            await self.session.commit()
            await self.session.refresh(message)
        return message

    async def unread_count(self, ctx: SessionContext) -> int:
        stmt = select(func.count(Message.id)).where(
            Message.receiver_id == ctx.user_id,
            Message.read_at == None
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def start_video_call(self, ctx: SessionContext, participant_id: UUID) -> VideoRoom:
        # Announce the call in the conversation so the other side can join
        await self.send(ctx, MessageCreate(receiver_id=participant_id, message=VIDEO_CALL_MARKER))
        return self.get_video_room(ctx, participant_id)

    def get_video_room(self, ctx: SessionContext, participant_id: UUID) -> VideoRoom:
        room_name = video_room_name(ctx.user_id, participant_id)
        return VideoRoom(room_name=room_name, url=video_room_url(room_name))
