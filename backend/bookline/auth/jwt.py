"""JWT token creation and validation.

Access tokens carry the full actor snapshot, so a role or permission change
takes effect with the next token (actors are never mutated in place).
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from bookline.auth.actor import Actor, Delegate, Owner
from bookline.auth.roles import Role
from bookline.config import settings

ALGORITHM = "HS256"


def create_access_token(actor: Actor) -> str:
    """Create a short-lived access token for an owner or a team member."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": str(actor.actor_id),
        "biz": str(actor.business_id),
        "kind": "owner" if isinstance(actor, Owner) else "delegate",
        "role": actor.role.value,
        "exp": expire,
        "type": "access",
    }
    if isinstance(actor, Delegate):
        payload["perms"] = sorted(p.value for p in actor.permissions)
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Decode and validate an access token. Raises JWTError on failure."""
    payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    if payload.get("type") != "access":
        raise JWTError("Invalid token type")
    return payload


def actor_from_claims(claims: dict) -> Actor:
    """Rebuild the actor from decoded claims. Raises JWTError on malformed claims."""
    actor_id = claims.get("sub")
    business_id = claims.get("biz")
    if not actor_id or not business_id:
        raise JWTError("Token is missing subject or business")

    kind = claims.get("kind")
    if kind == "owner":
        return Owner(actor_id=actor_id, business_id=business_id)
    if kind != "delegate":
        raise JWTError(f"Unknown actor kind: {kind!r}")

    try:
        return Delegate.from_grants(
            actor_id, business_id, claims.get("role", Role.STAFF.value), claims.get("perms", []),
        )
    except ValueError as e:
        raise JWTError(f"Invalid delegate claims: {e}") from e
