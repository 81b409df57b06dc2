from typing import Optional

from arthub.models.user import User


def public_user(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "role": user.role,
        "avatar": user.avatar,
        "bio": user.bio,
        "location": user.location,
        "verified": user.verified,
        "specializations": user.specialization_list,
        "rating": user.rating,
        "total_sales": user.total_sales,
        "total_ratings": user.total_ratings,
        "created_at": user.created_at,
    }


def private_user(user: User) -> dict:
    data = public_user(user)
    data.update({
        "email": user.email,
        "phone": user.phone,
        "is_active": user.is_active,
        "last_login": user.last_login,
        "instagram": user.instagram,
        "website": user.website,
        "facebook": user.facebook,
    })
    return data


def user_brief(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return {
        "id": user.id,
        "name": user.name,
        "avatar": user.avatar,
        "role": user.role,
        "verified": user.verified,
    }
