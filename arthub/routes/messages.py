import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from arthub.database import get_session
from arthub.models.artwork import Artwork
from arthub.models.message import Conversation, Message
from arthub.models.user import User
from arthub.schemas.message_schemas import MessageCreate
from arthub.utils.pagination import clamp_page
from arthub.utils.token import get_current_user
from arthub.utils.user_utils import user_brief

logger = logging.getLogger(__name__)

router = APIRouter()


def message_to_dict(message: Message) -> dict:
    return {
        "id": message.id,
        "conversation_id": message.conversation_id,
        "sender_id": message.sender_id,
        "receiver_id": message.receiver_id,
        "artwork_id": message.artwork_id,
        "content": message.content,
        "read": message.read,
        "read_at": message.read_at,
        "created_at": message.created_at,
    }


def _unread_query(user_id: int):
    return select(func.count()).select_from(Message).where(
        Message.receiver_id == user_id,
        Message.read == False  # noqa: E712
    )


def _find_or_create_conversation(session: Session, a: int, b: int, artwork_id=None) -> Conversation:
    one, two = Conversation.participants_for(a, b)

    query = select(Conversation).where(
        Conversation.participant_one_id == one,
        Conversation.participant_two_id == two
    )
    conversation = session.exec(query).first()
    if conversation:
        return conversation

    conversation = Conversation(participant_one_id=one, participant_two_id=two, artwork_id=artwork_id)
    session.add(conversation)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        return session.exec(query).first()

    session.refresh(conversation)
    return conversation


def _get_conversation_for(session: Session, conversation_id: int, user: User) -> Conversation:
    conversation = session.get(Conversation, conversation_id)
    if not conversation:
        raise HTTPException(404, "Conversation not found")

    if not conversation.has_participant(user.id):
        raise HTTPException(403, "Not a participant in this conversation")

    return conversation


def _mark_read(session: Session, conversation_id: int, user_id: int) -> int:
    unread = session.exec(
        select(Message).where(
            Message.conversation_id == conversation_id,
            Message.receiver_id == user_id,
            Message.read == False  # noqa: E712
        )
    ).all()

    now = datetime.utcnow()
    for message in unread:
        message.read = True
        message.read_at = now
        session.add(message)

    if unread:
        session.commit()
    return len(unread)


# -------- SEND --------

@router.post("/", status_code=201)
def send_message(
    data: MessageCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    if data.receiver_id == current_user.id:
        raise HTTPException(400, "You cannot message yourself")

    receiver = session.get(User, data.receiver_id)
    if not receiver or not receiver.is_active:
        raise HTTPException(404, "Receiver not found")

    if data.artwork_id is not None and not session.get(Artwork, data.artwork_id):
        raise HTTPException(404, "Artwork not found")

    conversation = _find_or_create_conversation(
        session, current_user.id, receiver.id, data.artwork_id
    )

    message = Message(
        conversation_id=conversation.id,
        sender_id=current_user.id,
        receiver_id=receiver.id,
        artwork_id=data.artwork_id,
        content=data.content,
    )
    session.add(message)
    session.flush()

    conversation.last_message_id = message.id
    conversation.last_message_at = message.created_at
    session.add(conversation)
    session.commit()
    session.refresh(message)

    logger.info(f"User {current_user.id} messaged user {receiver.id}")
    return {"message": "Message sent", "data": message_to_dict(message)}


# -------- CONVERSATIONS --------

@router.get("/conversations")
def list_conversations(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    conversations = session.exec(
        select(Conversation)
        .where(
            or_(
                Conversation.participant_one_id == current_user.id,
                Conversation.participant_two_id == current_user.id
            )
        )
        .order_by(Conversation.last_message_at.desc(), Conversation.id.desc())
    ).all()

    results = []
    for conversation in conversations:
        last_message = None
        if conversation.last_message_id:
            last_message = session.get(Message, conversation.last_message_id)

        unread = session.exec(
            _unread_query(current_user.id).where(Message.conversation_id == conversation.id)
        ).one()

        results.append({
            "id": conversation.id,
            "other_participant": user_brief(
                session.get(User, conversation.other_participant(current_user.id))
            ),
            "artwork_id": conversation.artwork_id,
            "last_message": message_to_dict(last_message) if last_message else None,
            "last_message_at": conversation.last_message_at,
            "unread_count": unread,
        })

    return {"conversations": results}


@router.get("/conversations/{conversation_id}")
def get_conversation_messages(
    conversation_id: int,
    page: int = 1,
    limit: int = 50,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    conversation = _get_conversation_for(session, conversation_id, current_user)

    page, limit = clamp_page(page, limit, max_limit=100)

    total = session.exec(
        select(func.count()).select_from(Message).where(Message.conversation_id == conversation.id)
    ).one()

    # newest page first, shown oldest to newest
    messages = session.exec(
        select(Message)
        .where(Message.conversation_id == conversation.id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    messages = list(reversed(messages))

    _mark_read(session, conversation.id, current_user.id)

    pages = (total + limit - 1) // limit
    return {
        "conversation_id": conversation.id,
        "other_participant": user_brief(
            session.get(User, conversation.other_participant(current_user.id))
        ),
        "messages": [message_to_dict(m) for m in messages],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": pages,
            "has_next": page < pages,
            "has_prev": page > 1,
        },
    }


@router.put("/conversations/{conversation_id}/read")
def mark_conversation_read(
    conversation_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    conversation = _get_conversation_for(session, conversation_id, current_user)
    updated = _mark_read(session, conversation.id, current_user.id)
    return {"message": "Messages marked as read", "updated": updated}


@router.get("/unread-count")
def unread_count(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return {"unread_count": session.exec(_unread_query(current_user.id)).one()}
