from dataclasses import dataclass
from typing import Optional
from jose import jwt, JWTError
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import AuthError as SupabaseAuthError, Client
from app.core.config import get_settings
from app.core.errors import AuthError
from app.db.database import get_supabase

# Bearer scheme for FastAPI dependency; missing headers are reported as AuthError
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: str
    email: Optional[str] = None


def decode_access_token(token: str) -> dict:
    """
    Verify a Supabase access token locally and return its claims.
    Only for tokens HS256-signed with the project's JWT secret.
    """
    settings = get_settings()
    if not settings.SUPABASE_JWT_SECRET:
        raise AuthError("Authentication is not configured")
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
    except JWTError as exc:
        raise AuthError("Could not validate credentials") from exc


def _token_algorithm(token: str) -> Optional[str]:
    try:
        return jwt.get_unverified_header(token).get("alg")
    except JWTError as exc:
        raise AuthError("Could not validate credentials") from exc


def fetch_user(sb: Client, token: str) -> CurrentUser:
    """Ask Supabase Auth who the token belongs to."""
    try:
        res = sb.auth.get_user(token)
    except SupabaseAuthError as exc:
        raise AuthError("Could not validate credentials") from exc
    user = getattr(res, "user", None)
    if user is None or not getattr(user, "id", None):
        raise AuthError("Could not validate credentials")
    return CurrentUser(id=str(user.id), email=getattr(user, "email", None))


def resolve_user(token: str, sb: Client) -> CurrentUser:
    # shared-secret tokens are checked here; asymmetric ones go to Supabase Auth
    settings = get_settings()
    if settings.SUPABASE_JWT_SECRET and _token_algorithm(token) == settings.ALGORITHM:
        payload = decode_access_token(token)
        user_id = payload.get("sub")
        if not user_id:
            raise AuthError("Could not validate credentials")
        return CurrentUser(id=str(user_id), email=payload.get("email"))
    return fetch_user(sb, token)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    sb: Client = Depends(get_supabase),
) -> CurrentUser:
    if credentials is None or not credentials.credentials:
        raise AuthError("Unauthorized")
    return resolve_user(credentials.credentials, sb)
