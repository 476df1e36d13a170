"""
Bearer-token team access guard.

Tokens are HS256 JWTs whose ``sub`` is the member's email. Issuing tokens
(login, invitations) happens elsewhere; ``create_access_token`` exists for
tooling and tests.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ppewatch.config import settings
from ppewatch.database import get_db
from ppewatch.models.team import Team, TeamMember

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class TeamAccess:
    """The team a request targets and the member making it."""
    team: Team
    member: TeamMember


def create_access_token(email: str, expires_minutes: Optional[int] = None) -> str:
    expire = datetime.utcnow() + timedelta(
        minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    return jwt.encode({"sub": email, "exp": expire}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_subject(token: str) -> str:
    """Email carried by a token, or 401."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise _unauthorized()
    email = payload.get("sub")
    if not email:
        raise _unauthorized()
    return email


async def require_team_access(
    slug: str,
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> TeamAccess:
    """
    Resolve ``{slug}`` and check the caller belongs to it.
    
    - no/invalid token -> 401
    - unknown slug -> 404
    - not a member -> 401
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized()
    email = decode_subject(credentials.credentials)
    
    result = await db.execute(select(Team).where(Team.slug == slug))
    team = result.scalar_one_or_none()
    if team is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    
    result = await db.execute(
        select(TeamMember).where(TeamMember.team_id == team.id, TeamMember.email == email)
    )
    member = result.scalar_one_or_none()
    if member is None:
        raise _unauthorized()
    
    # Expose user context to the request logger
    request.state.user_email = member.email
    request.state.team_id = team.id
    
    return TeamAccess(team=team, member=member)
