import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from arthub.database import get_session
from arthub.models.follow import Follow
from arthub.models.user import User
from arthub.utils.pagination import paginate
from arthub.utils.token import get_current_user
from arthub.utils.user_utils import public_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _find_follow(session: Session, follower_id: int, following_id: int):
    return session.exec(
        select(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id
        )
    ).first()


def _follower_count(session: Session, user_id: int) -> int:
    return session.exec(
        select(func.count()).select_from(Follow).where(Follow.following_id == user_id)
    ).one()


def _get_active_user(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(404, "User not found")
    return user


@router.get("/suggested")
def suggested_artists(
    limit: int = 5,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    followed = select(Follow.following_id).where(Follow.follower_id == current_user.id)

    artists = session.exec(
        select(User)
        .where(
            User.role == "artist",
            User.is_active == True,  # noqa: E712
            User.id != current_user.id,
            User.id.not_in(followed)
        )
        .order_by(User.verified.desc(), User.total_sales.desc(), User.id)
        .limit(min(max(limit, 1), 20))
    ).all()

    return {"artists": [public_user(a) for a in artists]}


@router.post("/{user_id}", status_code=201)
def follow_user(
    user_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    if user_id == current_user.id:
        raise HTTPException(400, "You cannot follow yourself")

    _get_active_user(session, user_id)

    if _find_follow(session, current_user.id, user_id):
        raise HTTPException(400, "Already following this user")

    session.add(Follow(follower_id=current_user.id, following_id=user_id))
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(400, "Already following this user")

    logger.info(f"User {current_user.id} followed {user_id}")
    return {
        "message": "Followed successfully",
        "following": True,
        "follower_count": _follower_count(session, user_id),
    }


@router.delete("/{user_id}")
def unfollow_user(
    user_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    follow = _find_follow(session, current_user.id, user_id)
    if not follow:
        raise HTTPException(400, "You are not following this user")

    session.delete(follow)
    session.commit()

    return {
        "message": "Unfollowed successfully",
        "following": False,
        "follower_count": _follower_count(session, user_id),
    }


@router.get("/{user_id}/status")
def follow_status(
    user_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return {
        "following": _find_follow(session, current_user.id, user_id) is not None,
        "followed_by": _find_follow(session, user_id, current_user.id) is not None,
    }


@router.get("/{user_id}/followers")
def list_followers(
    user_id: int,
    page: int = 1,
    limit: int = 20,
    session: Session = Depends(get_session)
):
    _get_active_user(session, user_id)

    query = (
        select(User)
        .join(Follow, Follow.follower_id == User.id)
        .where(Follow.following_id == user_id)
        .order_by(User.name, User.id)
    )

    data = paginate(session=session, query=query, page=page, limit=limit)
    return {
        "followers": [public_user(u) for u in data["results"]],
        "pagination": data["pagination"],
    }


@router.get("/{user_id}/following")
def list_following(
    user_id: int,
    page: int = 1,
    limit: int = 20,
    session: Session = Depends(get_session)
):
    _get_active_user(session, user_id)

    query = (
        select(User)
        .join(Follow, Follow.following_id == User.id)
        .where(Follow.follower_id == user_id)
        .order_by(User.name, User.id)
    )

    data = paginate(session=session, query=query, page=page, limit=limit)
    return {
        "following": [public_user(u) for u in data["results"]],
        "pagination": data["pagination"],
    }
