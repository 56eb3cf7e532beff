import logging

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from physiobook.auth import jwt_handler
from physiobook.auth.identity import CallerIdentity, resolve_identity
from physiobook.core.errors import Unauthorized
from physiobook.database import get_db
from physiobook.models.user import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise Unauthorized("Unauthorized - no token provided")

    try:
        payload = jwt_handler.decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError as exc:
        raise Unauthorized("Session expired. Please log in again.") from exc
    except jwt.InvalidTokenError as exc:
        raise Unauthorized("Unauthorized - invalid token") from exc

    subject = str(payload.get("sub") or "")
    if not subject.isdigit():
        raise Unauthorized("Invalid token subject")

    user = db.query(User).filter(User.id == int(subject)).first()
    if user is None:
        raise Unauthorized("User not found")
    return user


def get_current_identity(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CallerIdentity:
    identity = resolve_identity(db, user)
    logger.debug("Resolved caller %s as %s", user.id, identity.kind)
    return identity
