from sqlalchemy import func
from sqlmodel import select


def clamp_page(page: int, limit: int, max_limit: int = 50):
    if page < 1:
        page = 1

    if limit < 1:
        limit = 10

    return page, min(limit, max_limit)


def paginate(
    *,
    session,
    query,
    page: int = 1,
    limit: int = 10,
    max_limit: int = 50,
):
    page, limit = clamp_page(page, limit, max_limit)

    offset = (page - 1) * limit

    total = session.exec(
        select(func.count()).select_from(query.subquery())
    ).one()

    results = session.exec(
        query.offset(offset).limit(limit)
    ).all()

    pages = (total + limit - 1) // limit

    return {
        "results": results,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": pages,
            "has_next": page < pages,
            "has_prev": page > 1,
        },
    }
