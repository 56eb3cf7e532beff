from fastapi import APIRouter, Depends

from physiobook.auth.dependencies import get_current_identity, get_current_user
from physiobook.auth.identity import CallerIdentity
from physiobook.models.user import User

router = APIRouter(tags=['auth'])


@router.get("/me")
def me(
    current_user: User = Depends(get_current_user),
    identity: CallerIdentity = Depends(get_current_identity),
):
    return {"email": current_user.email, "name": current_user.name, "identity": identity.model_dump()}
