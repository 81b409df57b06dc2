import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from arthub.models.exhibition_access import ExhibitionAccess

logger = logging.getLogger(__name__)


def find_access(session: Session, user_id: int, exhibition_id: int) -> Optional[ExhibitionAccess]:
    return session.exec(
        select(ExhibitionAccess).where(
            ExhibitionAccess.user_id == user_id,
            ExhibitionAccess.exhibition_id == exhibition_id
        )
    ).first()


def build_access(
    *,
    user_id: int,
    exhibition_id: int,
    access_type: str,
    payment_method: Optional[str] = None,
    payment_session_id: Optional[str] = None,
    order_id: Optional[int] = None,
) -> ExhibitionAccess:
    return ExhibitionAccess(
        user_id=user_id,
        exhibition_id=exhibition_id,
        access_type=access_type,
        payment_method=payment_method,
        payment_session_id=payment_session_id,
        order_id=order_id,
    )


def grant_access(session: Session, **fields) -> ExhibitionAccess:
    """
    Insert an access record and commit.

    The (user, exhibition) pair is unique; a second grant is rejected
    with a 400.
    """
    access = build_access(**fields)
    session.add(access)

    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(400, "Access already granted for this exhibition")

    session.refresh(access)
    logger.info(
        f"Granted {access.access_type} access to exhibition {access.exhibition_id} "
        f"for user {access.user_id}"
    )
    return access
