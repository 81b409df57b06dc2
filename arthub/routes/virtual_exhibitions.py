import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from arthub.database import get_session
from arthub.dependencies.roles import is_owner_or_admin, require_artist
from arthub.models.virtual_exhibition import VirtualExhibition, VirtualExhibitionAttendee
from arthub.models.user import User
from arthub.schemas.artwork_schemas import normalize_tags
from arthub.schemas.exhibition_schemas import VirtualExhibitionCreate, VirtualExhibitionUpdate
from arthub.utils.pagination import paginate
from arthub.utils.token import get_current_user
from arthub.utils.user_utils import user_brief

logger = logging.getLogger(__name__)

router = APIRouter()

SETTINGS_FIELDS = ("allow_comments", "allow_sharing", "require_registration", "max_attendees")


def _attendee_count(session: Session, exhibition_id: int) -> int:
    return session.exec(
        select(func.count()).select_from(VirtualExhibitionAttendee).where(
            VirtualExhibitionAttendee.virtual_exhibition_id == exhibition_id
        )
    ).one()


def _get_virtual_exhibition(session: Session, exhibition_id: int) -> VirtualExhibition:
    exhibition = session.get(VirtualExhibition, exhibition_id)
    if not exhibition:
        raise HTTPException(404, "Virtual exhibition not found")
    return exhibition


def virtual_exhibition_to_dict(session: Session, exhibition: VirtualExhibition) -> dict:
    return {
        "id": exhibition.id,
        "title": exhibition.title,
        "description": exhibition.description,
        "theme": exhibition.theme,
        "artist_notes": exhibition.artist_notes,
        "start_date": exhibition.start_date,
        "end_date": exhibition.end_date,
        "organizer": user_brief(session.get(User, exhibition.organizer_id)),
        "status": exhibition.status,
        "featured_artworks": exhibition.featured_artwork_ids or [],
        "views": exhibition.views,
        "visits": exhibition.visits,
        "is_free": exhibition.is_free,
        "price": exhibition.price,
        "tags": [t for t in (exhibition.tags or "").split(",") if t],
        "cover_image": exhibition.cover_image,
        "additional_images": exhibition.additional_images or [],
        "settings": {field: getattr(exhibition, field) for field in SETTINGS_FIELDS},
        "attendee_count": _attendee_count(session, exhibition.id),
        "created_at": exhibition.created_at,
    }


# -------- LIST / DETAIL --------

@router.get("/")
def list_virtual_exhibitions(
    page: int = 1,
    limit: int = 10,
    status: Optional[str] = None,
    organizer: Optional[int] = None,
    theme: Optional[str] = None,
    is_free: Optional[bool] = None,
    search: Optional[str] = None,
    session: Session = Depends(get_session)
):
    query = select(VirtualExhibition)

    if status:
        query = query.where(VirtualExhibition.status == status)

    if organizer:
        query = query.where(VirtualExhibition.organizer_id == organizer)

    if theme:
        query = query.where(VirtualExhibition.theme.ilike(f"%{theme}%"))

    if is_free is not None:
        query = query.where(VirtualExhibition.is_free == is_free)

    if search:
        term = f"%{search}%"
        query = query.where(
            or_(
                VirtualExhibition.title.ilike(term),
                VirtualExhibition.description.ilike(term),
                VirtualExhibition.tags.ilike(term),
            )
        )

    query = query.order_by(VirtualExhibition.created_at.desc(), VirtualExhibition.id.desc())

    data = paginate(session=session, query=query, page=page, limit=limit)

    return {
        "virtual_exhibitions": [virtual_exhibition_to_dict(session, e) for e in data["results"]],
        "pagination": data["pagination"],
    }


@router.get("/{exhibition_id}")
def get_virtual_exhibition(exhibition_id: int, session: Session = Depends(get_session)):
    exhibition = _get_virtual_exhibition(session, exhibition_id)

    exhibition.views += 1
    session.add(exhibition)
    session.commit()
    session.refresh(exhibition)

    return virtual_exhibition_to_dict(session, exhibition)


# -------- CREATE / UPDATE / DELETE --------

@router.post("/", status_code=201)
def create_virtual_exhibition(
    data: VirtualExhibitionCreate,
    session: Session = Depends(get_session),
    artist: User = Depends(require_artist)
):
    exhibition = VirtualExhibition(
        title=data.title.strip(),
        description=data.description.strip(),
        theme=data.theme.strip(),
        artist_notes=data.artist_notes,
        start_date=data.start_date,
        end_date=data.end_date,
        organizer_id=artist.id,
        featured_artwork_ids=data.featured_artworks,
        is_free=data.is_free,
        price=0.0 if data.is_free else data.price,
        tags=normalize_tags(data.tags) or None,
        cover_image=data.cover_image,
        additional_images=data.additional_images,
        **data.settings.model_dump(),
    )

    session.add(exhibition)
    session.commit()
    session.refresh(exhibition)

    logger.info(f"Artist {artist.id} created virtual exhibition {exhibition.id}")
    return {
        "message": "Virtual exhibition created",
        "virtual_exhibition": virtual_exhibition_to_dict(session, exhibition),
    }


@router.put("/{exhibition_id}")
def update_virtual_exhibition(
    exhibition_id: int,
    data: VirtualExhibitionUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    exhibition = _get_virtual_exhibition(session, exhibition_id)

    if not is_owner_or_admin(current_user, exhibition.organizer_id):
        raise HTTPException(403, "Not authorized to update this exhibition")

    updates = data.model_dump(exclude_unset=True)

    start = updates.get("start_date") or exhibition.start_date
    end = updates.get("end_date") or exhibition.end_date
    if end <= start:
        raise HTTPException(400, "End date must be after start date")

    if "settings" in updates:
        settings = updates.pop("settings") or {}
        for field in SETTINGS_FIELDS:
            if field in settings:
                setattr(exhibition, field, settings[field])

    if "featured_artworks" in updates:
        exhibition.featured_artwork_ids = updates.pop("featured_artworks") or []

    if "tags" in updates:
        updates["tags"] = normalize_tags(updates["tags"]) or None

    for field, value in updates.items():
        setattr(exhibition, field, value)

    if exhibition.is_free:
        exhibition.price = 0.0

    exhibition.updated_at = datetime.utcnow()
    session.add(exhibition)
    session.commit()
    session.refresh(exhibition)

    return {
        "message": "Virtual exhibition updated",
        "virtual_exhibition": virtual_exhibition_to_dict(session, exhibition),
    }


@router.delete("/{exhibition_id}")
def delete_virtual_exhibition(
    exhibition_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    exhibition = _get_virtual_exhibition(session, exhibition_id)

    if not is_owner_or_admin(current_user, exhibition.organizer_id):
        raise HTTPException(403, "Not authorized to delete this exhibition")

    attendees = session.exec(
        select(VirtualExhibitionAttendee).where(
            VirtualExhibitionAttendee.virtual_exhibition_id == exhibition.id
        )
    ).all()
    for attendee in attendees:
        session.delete(attendee)

    session.delete(exhibition)
    session.commit()

    return {"message": "Virtual exhibition deleted"}


# -------- ATTENDANCE --------

@router.post("/{exhibition_id}/join")
def join_virtual_exhibition(
    exhibition_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    exhibition = _get_virtual_exhibition(session, exhibition_id)

    if exhibition.status != "published":
        raise HTTPException(400, "Exhibition is not open for attendees")

    existing = session.exec(
        select(VirtualExhibitionAttendee).where(
            VirtualExhibitionAttendee.virtual_exhibition_id == exhibition.id,
            VirtualExhibitionAttendee.user_id == current_user.id
        )
    ).first()
    if existing:
        raise HTTPException(400, "Already joined this exhibition")

    if exhibition.max_attendees and _attendee_count(session, exhibition.id) >= exhibition.max_attendees:
        raise HTTPException(400, "Exhibition is at full capacity")

    session.add(VirtualExhibitionAttendee(virtual_exhibition_id=exhibition.id, user_id=current_user.id))
    exhibition.visits += 1
    session.add(exhibition)

    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(400, "Already joined this exhibition")

    return {
        "message": "Joined exhibition",
        "attendee_count": _attendee_count(session, exhibition.id),
    }


@router.get("/{exhibition_id}/analytics")
def virtual_exhibition_analytics(
    exhibition_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    exhibition = _get_virtual_exhibition(session, exhibition_id)

    if not is_owner_or_admin(current_user, exhibition.organizer_id):
        raise HTTPException(403, "Not authorized to view analytics")

    attendees = _attendee_count(session, exhibition.id)

    return {
        "exhibition_id": exhibition.id,
        "views": exhibition.views,
        "visits": exhibition.visits,
        "attendees": attendees,
        "conversion_rate": round(attendees / exhibition.views * 100, 2) if exhibition.views else 0.0,
        "featured_artworks": len(exhibition.featured_artwork_ids or []),
    }
