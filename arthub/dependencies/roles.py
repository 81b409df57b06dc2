from fastapi import Depends, HTTPException
from arthub.models.user import User
from arthub.utils.token import get_current_user

def require_admin(current_user: User = Depends(get_current_user)):
    if current_user.role != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user

def require_artist(current_user: User = Depends(get_current_user)):
    if current_user.role != "artist":
        raise HTTPException(status_code=403, detail="Artist access required")
    return current_user

def is_owner_or_admin(user: User, owner_id: int) -> bool:
    return user.id == owner_id or user.role == "admin"
