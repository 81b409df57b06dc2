from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from arthub.database import get_session
from arthub.dependencies.roles import is_owner_or_admin
from arthub.models.artwork import Artwork
from arthub.models.comment import Comment, CommentLike
from arthub.models.user import User
from arthub.schemas.comment_schemas import CommentCreate, CommentUpdate
from arthub.utils.pagination import paginate
from arthub.utils.token import get_current_user, get_optional_user
from arthub.utils.user_utils import user_brief

router = APIRouter()


def _like_count(session: Session, comment_id: int) -> int:
    return session.exec(
        select(func.count()).select_from(CommentLike).where(CommentLike.comment_id == comment_id)
    ).one()


def _reply_count(session: Session, comment_id: int) -> int:
    return session.exec(
        select(func.count()).select_from(Comment).where(
            Comment.parent_comment_id == comment_id,
            Comment.is_deleted == False  # noqa: E712
        )
    ).one()


def comment_to_dict(session: Session, comment: Comment, viewer: Optional[User] = None) -> dict:
    liked = False
    if viewer:
        liked = session.exec(
            select(CommentLike).where(
                CommentLike.comment_id == comment.id,
                CommentLike.user_id == viewer.id
            )
        ).first() is not None

    return {
        "id": comment.id,
        "artwork_id": comment.artwork_id,
        "author": user_brief(session.get(User, comment.author_id)),
        "content": comment.content,
        "parent_comment_id": comment.parent_comment_id,
        "is_edited": comment.is_edited,
        "edited_at": comment.edited_at,
        "like_count": _like_count(session, comment.id),
        "reply_count": _reply_count(session, comment.id),
        "liked": liked,
        "created_at": comment.created_at,
    }


def _get_live_comment(session: Session, comment_id: int) -> Comment:
    comment = session.get(Comment, comment_id)
    if not comment or comment.is_deleted:
        raise HTTPException(404, "Comment not found")
    return comment


# ---------------------------------------------------------
# LIST COMMENTS FOR AN ARTWORK
# ---------------------------------------------------------

@router.get("/artwork/{artwork_id}")
def list_artwork_comments(
    artwork_id: int,
    page: int = 1,
    limit: int = 20,
    session: Session = Depends(get_session),
    viewer: Optional[User] = Depends(get_optional_user)
):
    if not session.get(Artwork, artwork_id):
        raise HTTPException(404, "Artwork not found")

    query = (
        select(Comment)
        .where(
            Comment.artwork_id == artwork_id,
            Comment.parent_comment_id == None,  # noqa: E711
            Comment.is_deleted == False  # noqa: E712
        )
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )

    data = paginate(session=session, query=query, page=page, limit=limit)

    return {
        "comments": [comment_to_dict(session, c, viewer) for c in data["results"]],
        "pagination": data["pagination"],
    }


@router.get("/{comment_id}/replies")
def list_replies(
    comment_id: int,
    page: int = 1,
    limit: int = 10,
    session: Session = Depends(get_session),
    viewer: Optional[User] = Depends(get_optional_user)
):
    _get_live_comment(session, comment_id)

    query = (
        select(Comment)
        .where(
            Comment.parent_comment_id == comment_id,
            Comment.is_deleted == False  # noqa: E712
        )
        .order_by(Comment.created_at, Comment.id)
    )

    data = paginate(session=session, query=query, page=page, limit=limit)

    return {
        "replies": [comment_to_dict(session, c, viewer) for c in data["results"]],
        "pagination": data["pagination"],
    }


# ---------------------------------------------------------
# CREATE / UPDATE / DELETE
# ---------------------------------------------------------

@router.post("/artwork/{artwork_id}", status_code=201)
def create_comment(
    artwork_id: int,
    data: CommentCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    if not session.get(Artwork, artwork_id):
        raise HTTPException(404, "Artwork not found")

    if data.parent_comment_id is not None:
        parent = session.get(Comment, data.parent_comment_id)
        if not parent or parent.is_deleted or parent.artwork_id != artwork_id:
            raise HTTPException(404, "Parent comment not found")

    comment = Comment(
        artwork_id=artwork_id,
        author_id=current_user.id,
        content=data.content,
        parent_comment_id=data.parent_comment_id,
    )

    session.add(comment)
    session.commit()
    session.refresh(comment)

    return {"message": "Comment added", "comment": comment_to_dict(session, comment, current_user)}


@router.put("/{comment_id}")
def update_comment(
    comment_id: int,
    data: CommentUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    comment = _get_live_comment(session, comment_id)

    if not is_owner_or_admin(current_user, comment.author_id):
        raise HTTPException(403, "Not authorized to edit this comment")

    now = datetime.utcnow()
    comment.content = data.content
    comment.is_edited = True
    comment.edited_at = now
    comment.updated_at = now

    session.add(comment)
    session.commit()
    session.refresh(comment)

    return {"message": "Comment updated", "comment": comment_to_dict(session, comment, current_user)}


@router.delete("/{comment_id}")
def delete_comment(
    comment_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    comment = _get_live_comment(session, comment_id)

    if not is_owner_or_admin(current_user, comment.author_id):
        raise HTTPException(403, "Not authorized to delete this comment")

    # soft delete, replies stay reachable by id
    comment.is_deleted = True
    comment.deleted_at = datetime.utcnow()
    comment.deleted_by = current_user.id

    session.add(comment)
    session.commit()

    return {"message": "Comment deleted"}


# ---------------------------------------------------------
# LIKES
# ---------------------------------------------------------

@router.post("/{comment_id}/like")
def toggle_comment_like(
    comment_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    comment = session.get(Comment, comment_id)
    if not comment:
        raise HTTPException(404, "Comment not found")

    if comment.is_deleted:
        raise HTTPException(400, "Cannot like a deleted comment")

    existing = session.exec(
        select(CommentLike).where(
            CommentLike.comment_id == comment_id,
            CommentLike.user_id == current_user.id
        )
    ).first()

    if existing:
        session.delete(existing)
        liked = False
    else:
        session.add(CommentLike(comment_id=comment_id, user_id=current_user.id))
        liked = True

    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        liked = True

    return {"liked": liked, "like_count": _like_count(session, comment_id)}
