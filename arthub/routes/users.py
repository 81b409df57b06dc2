import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, or_
from sqlmodel import Session, select

from arthub.database import get_session
from arthub.dependencies.roles import require_admin
from arthub.models.artwork import Artwork, ArtworkLike
from arthub.models.cart import Cart
from arthub.models.comment import Comment, CommentLike
from arthub.models.exhibition import Exhibition, ExhibitionRegistration
from arthub.models.exhibition_access import ExhibitionAccess
from arthub.models.follow import Follow
from arthub.models.message import Conversation
from arthub.models.order import Order
from arthub.models.user import User
from arthub.models.virtual_exhibition import VirtualExhibition, VirtualExhibitionAttendee
from arthub.schemas.user_schemas import AdminUserUpdate, ProfileUpdate
from arthub.utils.pagination import paginate
from arthub.utils.token import get_current_user
from arthub.utils.user_utils import private_user, public_user

logger = logging.getLogger(__name__)

router = APIRouter()

REQUIRED_FIELDS = ("role", "verified", "is_active", "total_sales", "rating", "total_ratings")


# -------- ARTISTS (PUBLIC) --------

@router.get("/artists")
def list_artists(
    page: int = 1,
    limit: int = 12,
    search: Optional[str] = None,
    specialization: Optional[str] = None,
    session: Session = Depends(get_session)
):
    query = select(User).where(User.role == "artist", User.is_active == True)  # noqa: E712

    if search:
        term = f"%{search}%"
        query = query.where(
            or_(User.name.ilike(term), User.bio.ilike(term), User.location.ilike(term))
        )

    if specialization:
        query = query.where(User.specializations.ilike(f"%{specialization}%"))

    query = query.order_by(User.verified.desc(), User.rating.desc(), User.total_sales.desc(), User.id)

    data = paginate(session=session, query=query, page=page, limit=limit)

    return {
        "artists": [public_user(u) for u in data["results"]],
        "pagination": data["pagination"],
    }


@router.get("/artists/{artist_id}")
def get_artist(artist_id: int, session: Session = Depends(get_session)):
    artist = session.get(User, artist_id)
    if not artist or artist.role != "artist" or not artist.is_active:
        raise HTTPException(404, "Artist not found")

    artwork_count = session.exec(
        select(func.count()).select_from(Artwork).where(Artwork.artist_id == artist.id)
    ).one()
    follower_count = session.exec(
        select(func.count()).select_from(Follow).where(Follow.following_id == artist.id)
    ).one()

    data = public_user(artist)
    data.update({
        "instagram": artist.instagram,
        "website": artist.website,
        "facebook": artist.facebook,
        "artwork_count": artwork_count,
        "follower_count": follower_count,
    })
    return data


# -------- USER PROFILE --------

@router.put("/me")
def update_profile(
    data: ProfileUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    updates = data.model_dump(exclude_unset=True)

    if "name" in updates:
        name = (updates.pop("name") or "").strip()
        if not name:
            raise HTTPException(400, "Name cannot be empty")
        current_user.name = name

    if "specializations" in updates:
        specs = updates.pop("specializations") or []
        current_user.specializations = ",".join(s.strip() for s in specs if s.strip()) or None

    for field, value in updates.items():
        setattr(current_user, field, value)

    current_user.updated_at = datetime.utcnow()
    session.add(current_user)
    session.commit()
    session.refresh(current_user)

    return {"message": "Profile updated successfully", "user": private_user(current_user)}


# -------- ADMIN --------

@router.get("/")
def list_users(
    page: int = 1,
    limit: int = 20,
    role: Optional[str] = None,
    search: Optional[str] = None,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    query = select(User)

    if role:
        query = query.where(User.role == role)

    if search:
        term = f"%{search}%"
        query = query.where(or_(User.name.ilike(term), User.email.ilike(term)))

    query = query.order_by(User.created_at.desc(), User.id.desc())

    data = paginate(session=session, query=query, page=page, limit=limit, max_limit=100)

    return {
        "users": [private_user(u) for u in data["results"]],
        "pagination": data["pagination"],
    }


@router.get("/admin/stats")
def admin_stats(
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    def count(query):
        return session.exec(query).one()

    revenue = session.exec(
        select(func.coalesce(func.sum(Order.total_amount), 0)).where(Order.status == "paid")
    ).one()

    return {
        "users": count(select(func.count()).select_from(User)),
        "artists": count(select(func.count()).select_from(User).where(User.role == "artist")),
        "artworks": count(select(func.count()).select_from(Artwork)),
        "available_artworks": count(
            select(func.count()).select_from(Artwork).where(Artwork.status == "available")
        ),
        "orders": count(select(func.count()).select_from(Order)),
        "paid_orders": count(select(func.count()).select_from(Order).where(Order.status == "paid")),
        "revenue": round(float(revenue or 0), 2),
    }


@router.patch("/{user_id}/toggle-status")
def toggle_user_status(
    user_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(404, "User not found")

    if user.id == admin.id:
        raise HTTPException(400, "Cannot deactivate your own account")

    user.is_active = not user.is_active
    user.updated_at = datetime.utcnow()
    session.add(user)
    session.commit()

    logger.info(f"Admin {admin.id} set user {user.id} active={user.is_active}")
    return {"message": "User status updated", "is_active": user.is_active}


@router.patch("/{user_id}/verify")
def verify_artist(
    user_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(404, "User not found")

    if user.role != "artist":
        raise HTTPException(400, "Only artists can be verified")

    user.verified = True
    user.updated_at = datetime.utcnow()
    session.add(user)
    session.commit()

    return {"message": "Artist verified", "verified": True}


@router.get("/admin/overview")
def admin_overview(
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    users_by_role = session.exec(
        select(User.role, func.count(User.id)).group_by(User.role)
    ).all()

    artworks_by_category = session.exec(
        select(Artwork.category, func.count(Artwork.id))
        .group_by(Artwork.category)
        .order_by(func.count(Artwork.id).desc(), Artwork.category)
    ).all()

    # stored status lags behind the calendar
    exhibitions_by_status = {"upcoming": 0, "ongoing": 0, "completed": 0}
    for exhibition in session.exec(select(Exhibition)).all():
        exhibitions_by_status[exhibition.refresh_status()] += 1

    month_start = datetime.utcnow().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    daily_signups = session.exec(
        select(func.date(User.created_at), func.count(User.id))
        .where(User.created_at >= month_start)
        .group_by(func.date(User.created_at))
        .order_by(func.date(User.created_at))
    ).all()

    return {
        "users_by_role": [{"role": r, "count": c} for r, c in users_by_role],
        "artworks_by_category": [
            {"category": cat, "count": c} for cat, c in artworks_by_category
        ],
        "exhibitions_by_status": [
            {"status": s, "count": c} for s, c in exhibitions_by_status.items()
        ],
        "daily_signups": [{"date": str(d), "count": c} for d, c in daily_signups],
    }


@router.get("/{user_id}")
def get_user(
    user_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(404, "User not found")

    return private_user(user)


@router.put("/{user_id}")
def update_user(
    user_id: int,
    data: AdminUserUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(404, "User not found")

    updates = data.model_dump(exclude_unset=True)

    if "name" in updates:
        name = (updates.pop("name") or "").strip()
        if not name:
            raise HTTPException(400, "Name cannot be empty")
        user.name = name

    if "email" in updates:
        email = updates.pop("email")
        if email is None:
            raise HTTPException(400, "Email cannot be empty")
        taken = session.exec(
            select(User).where(User.email == email, User.id != user.id)
        ).first()
        if taken:
            raise HTTPException(400, "Email already registered")
        user.email = email

    if user.id == admin.id and (
        updates.get("role", "admin") != "admin" or updates.get("is_active") is False
    ):
        raise HTTPException(400, "Cannot demote or deactivate your own account")

    if "specializations" in updates:
        specs = updates.pop("specializations") or []
        user.specializations = ",".join(s.strip() for s in specs if s.strip()) or None

    for field, value in updates.items():
        if value is None and field in REQUIRED_FIELDS:
            raise HTTPException(400, f"{field} cannot be null")
        setattr(user, field, value)

    user.updated_at = datetime.utcnow()
    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info(f"Admin {admin.id} updated user {user.id}")
    return {"message": "User updated successfully", "user": private_user(user)}


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(404, "User not found")

    if user.id == admin.id:
        raise HTTPException(400, "Cannot delete your own account")

    def exists(query) -> bool:
        return session.exec(query.limit(1)).first() is not None

    # accounts that own content are deactivated, not deleted
    if (
        exists(select(Artwork.id).where(Artwork.artist_id == user.id))
        or exists(select(Order.id).where(Order.user_id == user.id))
        or exists(select(Comment.id).where(Comment.author_id == user.id))
        or exists(select(Conversation.id).where(
            or_(Conversation.participant_one_id == user.id, Conversation.participant_two_id == user.id)
        ))
        or exists(select(Exhibition.id).where(Exhibition.organizer_id == user.id))
        or exists(select(VirtualExhibition.id).where(VirtualExhibition.organizer_id == user.id))
    ):
        raise HTTPException(400, "User has activity on the platform; deactivate the account instead")

    cart = session.exec(select(Cart).where(Cart.user_id == user.id)).first()
    if cart:
        # items go with the cart
        session.delete(cart)

    for model, column in (
        (Follow, Follow.follower_id),
        (Follow, Follow.following_id),
        (ArtworkLike, ArtworkLike.user_id),
        (CommentLike, CommentLike.user_id),
        (ExhibitionRegistration, ExhibitionRegistration.user_id),
        (ExhibitionAccess, ExhibitionAccess.user_id),
        (VirtualExhibitionAttendee, VirtualExhibitionAttendee.user_id),
    ):
        for row in session.exec(select(model).where(column == user.id)).all():
            session.delete(row)

    session.flush()
    session.delete(user)
    session.commit()

    logger.info(f"Admin {admin.id} deleted user {user_id}")
    return {"message": "User deleted successfully"}
