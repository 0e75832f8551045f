"""Team login: Exchanges a team member's credentials for an access token."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from bookline.api.deps import get_team_directory
from bookline.auth.jwt import create_access_token
from bookline.schemas.schemas import TeamLoginRequest, TeamMemberSchema, TokenResponse
from bookline.services.team_directory import TeamDirectory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/team-login", response_model=TokenResponse)
async def team_login(body: TeamLoginRequest,
                     directory: TeamDirectory = Depends(get_team_directory)):
    member = directory.authenticate(body.business_id, body.email, body.password)
    if member is None:
        logger.info("Failed team login for %s (business %s)", body.email, body.business_id)
        raise HTTPException(status_code=401, detail="Invalid email or password")

    logger.info("Team member logged in: %s (%s)", member.email, member.role.value)
    return TokenResponse(
        access_token=create_access_token(member.to_actor()),
        member=TeamMemberSchema(**member.to_dict()),
    )
