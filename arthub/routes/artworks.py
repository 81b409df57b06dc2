import logging
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from arthub.database import get_session
from arthub.dependencies.roles import is_owner_or_admin, require_artist
from arthub.models.artwork import CATEGORIES, PLACEHOLDER_IMAGE, Artwork, ArtworkLike
from arthub.models.cart import CartItem
from arthub.models.comment import Comment, CommentLike
from arthub.models.order_item import OrderItem
from arthub.models.user import User
from arthub.schemas.artwork_schemas import ArtworkCreate, ArtworkUpdate, normalize_tags
from arthub.utils.pagination import paginate
from arthub.utils.token import get_current_user, get_optional_user
from arthub.utils.user_utils import user_brief

logger = logging.getLogger(__name__)

router = APIRouter()

SORT_FIELDS = {
    "created_at": Artwork.created_at,
    "price": Artwork.price,
    "views": Artwork.views,
    "title": Artwork.title,
}


def _like_count(session: Session, artwork_id: int) -> int:
    return session.exec(
        select(func.count()).select_from(ArtworkLike).where(ArtworkLike.artwork_id == artwork_id)
    ).one()


def artwork_to_dict(session: Session, artwork: Artwork, artist: Optional[User] = None) -> dict:
    if artist is None:
        artist = session.get(User, artwork.artist_id)
    return {
        "id": artwork.id,
        "title": artwork.title,
        "description": artwork.description,
        "price": artwork.price,
        "category": artwork.category,
        "medium": artwork.medium,
        "dimensions": artwork.dimensions,
        "images": artwork.images or [],
        "status": artwork.status,
        "tags": artwork.tag_list,
        "views": artwork.views,
        "featured": artwork.featured,
        "like_count": _like_count(session, artwork.id),
        "artist": user_brief(artist),
        "created_at": artwork.created_at,
        "updated_at": artwork.updated_at,
    }


# -------- PUBLIC LISTING --------

@router.get("/")
def list_artworks(
    page: int = 1,
    limit: int = 12,
    category: Optional[str] = None,
    artist: Optional[int] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    status: str = "available",
    search: Optional[str] = None,
    sort_by: Literal["created_at", "price", "views", "title"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    session: Session = Depends(get_session)
):
    query = select(Artwork)

    if status != "all":
        query = query.where(Artwork.status == status)

    if category and category != "all":
        query = query.where(Artwork.category == category)

    if artist:
        query = query.where(Artwork.artist_id == artist)

    if min_price is not None:
        query = query.where(Artwork.price >= min_price)

    if max_price is not None:
        query = query.where(Artwork.price <= max_price)

    if search:
        term = f"%{search}%"
        query = query.where(
            or_(
                Artwork.title.ilike(term),
                Artwork.description.ilike(term),
                Artwork.tags.ilike(term),
            )
        )

    column = SORT_FIELDS[sort_by]
    query = query.order_by(column.asc() if sort_order == "asc" else column.desc(), Artwork.id)

    data = paginate(session=session, query=query, page=page, limit=limit, max_limit=50)

    return {
        "artworks": [artwork_to_dict(session, a) for a in data["results"]],
        "pagination": data["pagination"],
    }


@router.get("/categories")
def list_categories():
    return {"categories": CATEGORIES}


@router.get("/{artwork_id}")
def get_artwork(
    artwork_id: int,
    session: Session = Depends(get_session),
    viewer: Optional[User] = Depends(get_optional_user)
):
    artwork = session.get(Artwork, artwork_id)
    if not artwork:
        raise HTTPException(404, "Artwork not found")

    if not viewer or viewer.id != artwork.artist_id:
        artwork.views += 1
        session.add(artwork)
        session.commit()
        session.refresh(artwork)

    data = artwork_to_dict(session, artwork)

    data["liked"] = False
    if viewer:
        data["liked"] = session.exec(
            select(ArtworkLike).where(
                ArtworkLike.artwork_id == artwork.id,
                ArtworkLike.user_id == viewer.id
            )
        ).first() is not None

    return data


# -------- ARTIST --------

@router.post("/", status_code=201)
def create_artwork(
    data: ArtworkCreate,
    session: Session = Depends(get_session),
    artist: User = Depends(require_artist)
):
    images = [i for i in data.images if i] or [PLACEHOLDER_IMAGE]

    artwork = Artwork(
        title=data.title.strip(),
        description=data.description.strip(),
        price=data.price,
        category=data.category,
        medium=data.medium.strip(),
        dimensions=data.dimensions.strip(),
        images=images,
        tags=normalize_tags(data.tags) or None,
        artist_id=artist.id,
    )

    session.add(artwork)
    session.commit()
    session.refresh(artwork)

    logger.info(f"Artist {artist.id} created artwork {artwork.id}")
    return {"message": "Artwork created successfully", "artwork": artwork_to_dict(session, artwork, artist)}


@router.put("/{artwork_id}")
def update_artwork(
    artwork_id: int,
    data: ArtworkUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    artwork = session.get(Artwork, artwork_id)
    if not artwork:
        raise HTTPException(404, "Artwork not found")

    if not is_owner_or_admin(current_user, artwork.artist_id):
        raise HTTPException(403, "Not authorized to update this artwork")

    updates = data.model_dump(exclude_unset=True)
    if "tags" in updates:
        updates["tags"] = normalize_tags(updates["tags"]) or None

    for field, value in updates.items():
        setattr(artwork, field, value)

    artwork.updated_at = datetime.utcnow()
    session.add(artwork)
    session.commit()
    session.refresh(artwork)

    return {"message": "Artwork updated successfully", "artwork": artwork_to_dict(session, artwork)}


@router.delete("/{artwork_id}")
def delete_artwork(
    artwork_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    artwork = session.get(Artwork, artwork_id)
    if not artwork:
        raise HTTPException(404, "Artwork not found")

    if not is_owner_or_admin(current_user, artwork.artist_id):
        raise HTTPException(403, "Not authorized to delete this artwork")

    ordered = session.exec(
        select(OrderItem).where(OrderItem.artwork_id == artwork.id)
    ).first()
    if ordered:
        raise HTTPException(400, "Cannot delete an artwork that has been ordered")

    for model in (ArtworkLike, CartItem):
        for row in session.exec(select(model).where(model.artwork_id == artwork.id)).all():
            session.delete(row)

    comments = session.exec(select(Comment).where(Comment.artwork_id == artwork.id)).all()
    for comment in comments:
        for like in session.exec(select(CommentLike).where(CommentLike.comment_id == comment.id)).all():
            session.delete(like)
    # replies reference their parent, so they go first
    for comment in comments:
        if comment.parent_comment_id is not None:
            session.delete(comment)
    session.flush()
    for comment in comments:
        if comment.parent_comment_id is None:
            session.delete(comment)

    session.delete(artwork)
    session.commit()

    logger.info(f"User {current_user.id} deleted artwork {artwork_id}")
    return {"message": "Artwork deleted successfully"}


# -------- LIKES --------

@router.post("/{artwork_id}/like")
def toggle_like(
    artwork_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    artwork = session.get(Artwork, artwork_id)
    if not artwork:
        raise HTTPException(404, "Artwork not found")

    existing = session.exec(
        select(ArtworkLike).where(
            ArtworkLike.artwork_id == artwork_id,
            ArtworkLike.user_id == current_user.id
        )
    ).first()

    if existing:
        session.delete(existing)
        liked = False
    else:
        session.add(ArtworkLike(artwork_id=artwork_id, user_id=current_user.id))
        liked = True

    try:
        session.commit()
    except IntegrityError:
        # double click: the like already exists
        session.rollback()
        liked = True

    return {"liked": liked, "like_count": _like_count(session, artwork_id)}
