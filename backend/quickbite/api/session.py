import uuid
from typing import Optional

from fastapi import Request, Response

SESSION_COOKIE = "session_uuid"


def get_session_uuid(request: Request) -> Optional[str]:
    return request.cookies.get(SESSION_COOKIE)


def ensure_session(request: Request, response: Response) -> str:
    """Return the caller's session uuid, issuing a cookie for a new one if needed."""
    session_uuid = get_session_uuid(request)
    if not session_uuid:
        session_uuid = uuid.uuid4().hex
    set_session_cookie(response, session_uuid)
    return session_uuid


def set_session_cookie(response: Response, session_uuid: str):
    response.set_cookie(SESSION_COOKIE, session_uuid, httponly=False, samesite="Lax")


def get_progression(request: Request):
    # absent until the app lifespan has started the scheduler
    return getattr(request.app.state, "progression", None)
