from fastapi import APIRouter, Depends

from ..models.user import User
from ..utils.roles import hr_only

router = APIRouter(prefix="/hr", tags=["HR"])


@router.get("/profile")
def hr_profile(user: User = Depends(hr_only)):
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "company": user.company,
        "role": user.role,
    }
