import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from arthub.database import get_session
from arthub.dependencies.roles import require_admin
from arthub.models.exhibition import Exhibition, ExhibitionRegistration
from arthub.models.user import User
from arthub.schemas.artwork_schemas import normalize_tags
from arthub.schemas.exhibition_schemas import ExhibitionCreate
from arthub.services import order_service
from arthub.services.exhibition_access_service import find_access, grant_access
from arthub.services.payment_service import PaymentGateway, get_payment_gateway
from arthub.utils.pagination import paginate
from arthub.utils.token import get_current_user, get_optional_user
from arthub.utils.user_utils import user_brief

logger = logging.getLogger(__name__)

router = APIRouter()


def _registration_count(session: Session, exhibition_id: int) -> int:
    return session.exec(
        select(func.count()).select_from(ExhibitionRegistration).where(
            ExhibitionRegistration.exhibition_id == exhibition_id
        )
    ).one()


def _find_registration(session: Session, exhibition_id: int, user_id: int):
    return session.exec(
        select(ExhibitionRegistration).where(
            ExhibitionRegistration.exhibition_id == exhibition_id,
            ExhibitionRegistration.user_id == user_id
        )
    ).first()


def _get_exhibition(session: Session, exhibition_id: int) -> Exhibition:
    exhibition = session.get(Exhibition, exhibition_id)
    if not exhibition:
        raise HTTPException(404, "Exhibition not found")
    return exhibition


def exhibition_to_dict(session: Session, exhibition: Exhibition) -> dict:
    return {
        "id": exhibition.id,
        "title": exhibition.title,
        "description": exhibition.description,
        "start_date": exhibition.start_date,
        "end_date": exhibition.end_date,
        "location": exhibition.location,
        "image": exhibition.image,
        "featured_artworks": exhibition.featured_artwork_ids or [],
        "organizer": user_brief(session.get(User, exhibition.organizer_id)),
        "status": exhibition.refresh_status(),
        "max_capacity": exhibition.max_capacity,
        "access_type": exhibition.access_type,
        "price": exhibition.price,
        "is_free": exhibition.is_free,
        "tags": [t for t in (exhibition.tags or "").split(",") if t],
        "registration_count": _registration_count(session, exhibition.id),
        "created_at": exhibition.created_at,
    }


# -------- PUBLIC --------

@router.get("/")
def list_exhibitions(
    page: int = 1,
    limit: int = 10,
    status: Optional[str] = None,
    upcoming: bool = False,
    session: Session = Depends(get_session)
):
    now = datetime.utcnow()
    query = select(Exhibition)

    # status is derived from the dates, so filter on them directly
    if upcoming or status == "upcoming":
        query = query.where(Exhibition.start_date > now)
    elif status == "ongoing":
        query = query.where(Exhibition.start_date <= now, Exhibition.end_date >= now)
    elif status == "completed":
        query = query.where(Exhibition.end_date < now)

    query = query.order_by(Exhibition.start_date, Exhibition.id)

    data = paginate(session=session, query=query, page=page, limit=limit)

    return {
        "exhibitions": [exhibition_to_dict(session, e) for e in data["results"]],
        "pagination": data["pagination"],
    }


@router.get("/{exhibition_id}")
def get_exhibition(
    exhibition_id: int,
    session: Session = Depends(get_session),
    viewer: Optional[User] = Depends(get_optional_user)
):
    exhibition = _get_exhibition(session, exhibition_id)
    data = exhibition_to_dict(session, exhibition)

    data["is_registered"] = False
    if viewer:
        data["is_registered"] = _find_registration(session, exhibition.id, viewer.id) is not None

    return data


# -------- ADMIN --------

@router.post("/", status_code=201)
def create_exhibition(
    data: ExhibitionCreate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    exhibition = Exhibition(
        title=data.title.strip(),
        description=data.description.strip(),
        start_date=data.start_date,
        end_date=data.end_date,
        location=data.location.strip(),
        image=data.image,
        featured_artwork_ids=data.featured_artworks,
        organizer_id=admin.id,
        max_capacity=data.max_capacity,
        access_type=data.access_type,
        price=data.price if data.access_type == "paid" else 0.0,
        tags=normalize_tags(data.tags) or None,
    )
    exhibition.refresh_status()

    session.add(exhibition)
    session.commit()
    session.refresh(exhibition)

    logger.info(f"Admin {admin.id} created exhibition {exhibition.id}")
    return {"message": "Exhibition created", "exhibition": exhibition_to_dict(session, exhibition)}


# -------- REGISTRATION --------

@router.post("/{exhibition_id}/register")
def toggle_registration(
    exhibition_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    exhibition = _get_exhibition(session, exhibition_id)

    if exhibition.refresh_status() == "completed":
        raise HTTPException(400, "Cannot register for a completed exhibition")

    existing = _find_registration(session, exhibition.id, current_user.id)

    if existing:
        session.delete(existing)
        session.commit()
        registered = False
    else:
        count = _registration_count(session, exhibition.id)
        if exhibition.max_capacity and count >= exhibition.max_capacity:
            raise HTTPException(400, "Exhibition is at full capacity")

        session.add(ExhibitionRegistration(exhibition_id=exhibition.id, user_id=current_user.id))
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
        registered = True

    return {
        "registered": registered,
        "registration_count": _registration_count(session, exhibition.id),
    }


# -------- ACCESS --------

@router.post("/{exhibition_id}/access")
def request_access(
    exhibition_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway)
):
    exhibition = _get_exhibition(session, exhibition_id)

    if find_access(session, current_user.id, exhibition.id):
        raise HTTPException(400, "Access already granted for this exhibition")

    if exhibition.is_free:
        access = grant_access(
            session,
            user_id=current_user.id,
            exhibition_id=exhibition.id,
            access_type="free",
        )
        return {
            "message": "Access granted",
            "has_access": True,
            "access_type": access.access_type,
        }

    checkout = order_service.create_exhibition_checkout(session, current_user, exhibition, gateway)
    return {
        "message": "Complete payment to access this exhibition",
        "has_access": False,
        "checkout": checkout,
    }


@router.get("/{exhibition_id}/access")
def check_access(
    exhibition_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    exhibition = _get_exhibition(session, exhibition_id)
    access = find_access(session, current_user.id, exhibition.id)

    return {
        "has_access": access is not None,
        "access_type": access.access_type if access else None,
        "accessed_at": access.accessed_at if access else None,
    }
