"""Team management: CRUD for the team members a business delegates access to."""

from fastapi import APIRouter, Depends, Response

from bookline.api.deps import get_request_context, get_team_directory
from bookline.auth.context import RequestContext
from bookline.schemas.schemas import TeamMemberCreate, TeamMemberSchema, TeamMemberUpdate
from bookline.services.team_directory import TeamDirectory

router = APIRouter(prefix="/api/team", tags=["team"])


@router.get("", response_model=list[TeamMemberSchema])
async def list_team(ctx: RequestContext = Depends(get_request_context),
                    directory: TeamDirectory = Depends(get_team_directory)):
    return [m.to_dict() for m in directory.list_members(ctx)]


@router.get("/{member_id}", response_model=TeamMemberSchema)
async def get_team_member(member_id: str,
                          ctx: RequestContext = Depends(get_request_context),
                          directory: TeamDirectory = Depends(get_team_directory)):
    return directory.get_member(ctx, member_id).to_dict()


@router.post("", response_model=TeamMemberSchema, status_code=201)
async def create_team_member(body: TeamMemberCreate,
                             ctx: RequestContext = Depends(get_request_context),
                             directory: TeamDirectory = Depends(get_team_directory)):
    member = directory.create_member(ctx, **body.model_dump())
    return member.to_dict()


@router.patch("/{member_id}", response_model=TeamMemberSchema)
async def update_team_member(member_id: str,
                             body: TeamMemberUpdate,
                             ctx: RequestContext = Depends(get_request_context),
                             directory: TeamDirectory = Depends(get_team_directory)):
    member = directory.update_member(ctx, member_id, **body.model_dump(exclude_unset=True, exclude_none=True))
    return member.to_dict()


@router.delete("/{member_id}", status_code=204)
async def delete_team_member(member_id: str,
                             ctx: RequestContext = Depends(get_request_context),
                             directory: TeamDirectory = Depends(get_team_directory)):
    directory.delete_member(ctx, member_id)
    return Response(status_code=204)
