from datetime import datetime, timedelta
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlmodel import Session, select

from arthub.database import get_session
from arthub.dependencies.roles import is_owner_or_admin, require_artist
from arthub.models.artwork import Artwork, ArtworkLike
from arthub.models.comment import Comment
from arthub.models.exhibition import Exhibition, ExhibitionRegistration
from arthub.models.follow import Follow
from arthub.models.order import Order
from arthub.models.order_item import OrderItem
from arthub.models.user import User
from arthub.models.virtual_exhibition import VirtualExhibition, VirtualExhibitionAttendee
from arthub.utils.pagination import paginate
from arthub.utils.token import get_current_user
from arthub.utils.user_utils import user_brief

router = APIRouter()


def _percent(part, whole) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def _attendee_brief(user: User, joined_at: datetime) -> dict:
    return {**user_brief(user), "email": user.email, "joined_at": joined_at}


@router.get("/artist")
def artist_analytics(
    session: Session = Depends(get_session),
    artist: User = Depends(require_artist)
):
    artwork_count, total_views = session.exec(
        select(func.count(Artwork.id), func.coalesce(func.sum(Artwork.views), 0))
        .where(Artwork.artist_id == artist.id)
    ).one()

    sold_count = session.exec(
        select(func.count()).select_from(Artwork).where(
            Artwork.artist_id == artist.id,
            Artwork.status == "sold"
        )
    ).one()

    total_likes = session.exec(
        select(func.count())
        .select_from(ArtworkLike)
        .join(Artwork, ArtworkLike.artwork_id == Artwork.id)
        .where(Artwork.artist_id == artist.id)
    ).one()

    followers = session.exec(
        select(func.count()).select_from(Follow).where(Follow.following_id == artist.id)
    ).one()

    return {
        "artwork_count": artwork_count,
        "total_views": int(total_views or 0),
        "total_likes": total_likes,
        "followers": followers,
        "sold_count": sold_count,
        "total_sales": round(artist.total_sales, 2),
    }


@router.get("/artwork/{artwork_id}")
def artwork_analytics(
    artwork_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    artwork = session.get(Artwork, artwork_id)
    if not artwork:
        raise HTTPException(404, "Artwork not found")

    if not is_owner_or_admin(current_user, artwork.artist_id):
        raise HTTPException(403, "Not authorized to view this artwork analytics")

    comments = session.exec(
        select(Comment)
        .where(Comment.artwork_id == artwork.id, Comment.is_deleted == False)  # noqa: E712
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    ).all()

    likers = session.exec(
        select(User)
        .join(ArtworkLike, ArtworkLike.user_id == User.id)
        .where(ArtworkLike.artwork_id == artwork.id)
        .order_by(ArtworkLike.created_at.desc())
    ).all()

    return {
        "artwork": {
            "id": artwork.id,
            "title": artwork.title,
            "status": artwork.status,
            "price": artwork.price,
            "created_at": artwork.created_at,
        },
        "engagement": {
            "views": artwork.views,
            "likes": len(likers),
            "comments": len(comments),
            "engagement_rate": _percent(len(likers) + len(comments), artwork.views),
        },
        "comments": [
            {
                "id": c.id,
                "content": c.content,
                "author": user_brief(session.get(User, c.author_id)),
                "created_at": c.created_at,
            }
            for c in comments
        ],
        "likes": [user_brief(u) for u in likers],
    }


@router.get("/exhibition/{exhibition_id}")
def exhibition_analytics(
    exhibition_id: int,
    type: Literal["virtual", "physical"] = "virtual",
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    model = VirtualExhibition if type == "virtual" else Exhibition
    exhibition = session.get(model, exhibition_id)
    if not exhibition:
        raise HTTPException(404, "Exhibition not found")

    if not is_owner_or_admin(current_user, exhibition.organizer_id):
        raise HTTPException(403, "Not authorized to view this exhibition analytics")

    if type == "virtual":
        rows = session.exec(
            select(User, VirtualExhibitionAttendee.joined_at)
            .join(VirtualExhibitionAttendee, VirtualExhibitionAttendee.user_id == User.id)
            .where(VirtualExhibitionAttendee.virtual_exhibition_id == exhibition.id)
            .order_by(VirtualExhibitionAttendee.joined_at)
        ).all()

        analytics = {
            "views": exhibition.views,
            "visits": exhibition.visits,
            "attendee_count": len(rows),
            "attendees": [_attendee_brief(u, joined_at) for u, joined_at in rows],
            "engagement_rate": _percent(exhibition.visits, exhibition.views),
        }
    else:
        exhibition.refresh_status()
        rows = session.exec(
            select(User, ExhibitionRegistration.created_at)
            .join(ExhibitionRegistration, ExhibitionRegistration.user_id == User.id)
            .where(ExhibitionRegistration.exhibition_id == exhibition.id)
            .order_by(ExhibitionRegistration.created_at)
        ).all()

        analytics = {
            "registered_count": len(rows),
            "registered_users": [_attendee_brief(u, joined_at) for u, joined_at in rows],
            "max_capacity": exhibition.max_capacity,
            "capacity_utilization": _percent(len(rows), exhibition.max_capacity),
        }

    return {
        "exhibition": {
            "id": exhibition.id,
            "type": type,
            "title": exhibition.title,
            "status": exhibition.status,
            "start_date": exhibition.start_date,
            "end_date": exhibition.end_date,
        },
        "analytics": analytics,
    }


@router.get("/followers")
def follower_analytics(
    page: int = 1,
    limit: int = 20,
    session: Session = Depends(get_session),
    artist: User = Depends(require_artist)
):
    query = (
        select(User)
        .join(Follow, Follow.follower_id == User.id)
        .where(Follow.following_id == artist.id)
        .order_by(Follow.created_at.desc(), Follow.id.desc())
    )

    data = paginate(session=session, query=query, page=page, limit=limit)

    followers = []
    for follower in data["results"]:
        artworks_count, total_views = session.exec(
            select(func.count(Artwork.id), func.coalesce(func.sum(Artwork.views), 0))
            .where(Artwork.artist_id == follower.id)
        ).one()

        total_likes = session.exec(
            select(func.count())
            .select_from(ArtworkLike)
            .join(Artwork, ArtworkLike.artwork_id == Artwork.id)
            .where(Artwork.artist_id == follower.id)
        ).one()

        followers.append({
            **user_brief(follower),
            "bio": follower.bio,
            "engagement": {
                "artworks_count": artworks_count,
                "total_likes": total_likes,
                "total_views": int(total_views or 0),
            },
        })

    return {"followers": followers, "pagination": data["pagination"]}


@router.get("/sales")
def sales_analytics(
    period: int = Query(30, ge=1, le=365),
    session: Session = Depends(get_session),
    artist: User = Depends(require_artist)
):
    since = datetime.utcnow() - timedelta(days=period)

    # sales come from paid order lines, priced at checkout
    rows = session.exec(
        select(OrderItem, Order.paid_at)
        .join(Order, OrderItem.order_id == Order.id)
        .join(Artwork, OrderItem.artwork_id == Artwork.id)
        .where(
            Artwork.artist_id == artist.id,
            Order.status == "paid",
            Order.paid_at >= since
        )
        .order_by(Order.paid_at.desc(), OrderItem.id.desc())
    ).all()

    amounts = [item.price * item.quantity for item, _ in rows]
    total = round(sum(amounts), 2)

    return {
        "period": period,
        "total_sales": total,
        "sold_count": len(rows),
        "average_price": round(total / len(rows), 2) if rows else 0.0,
        "sold_artworks": [
            {
                "artwork_id": item.artwork_id,
                "title": item.title,
                "price": item.price,
                "quantity": item.quantity,
                "sold_at": paid_at,
            }
            for item, paid_at in rows
        ],
    }
