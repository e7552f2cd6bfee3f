"""Bearer token helpers for the token-based ``api`` guard."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from model_tracker.config import Settings, get_settings

DEFAULT_TOKEN_LIFETIME = timedelta(minutes=30)


def _secret_key(settings: Settings) -> str:
    if not settings.jwt_secret_key:
        raise ValueError("MODEL_TRACKER_JWT_SECRET_KEY is not configured")
    return settings.jwt_secret_key


def create_access_token(
    data: dict,
    expires_delta: timedelta | None = None,
    *,
    settings: Settings | None = None,
) -> str:
    settings = settings or get_settings()
    expire = datetime.now(timezone.utc) + (expires_delta or DEFAULT_TOKEN_LIFETIME)
    return jwt.encode(
        {**data, "exp": expire}, _secret_key(settings), algorithm=settings.jwt_algorithm
    )


def decode_access_token(token: str, *, settings: Settings | None = None) -> dict:
    settings = settings or get_settings()
    try:
        return jwt.decode(token, _secret_key(settings), algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc


def user_id_from_claims(claims: dict, *, settings: Settings | None = None) -> int:
    """Return the user id stored in ``claims`` under ``jwt_user_claim``."""

    settings = settings or get_settings()
    raw_value = claims.get(settings.jwt_user_claim)
    if raw_value is None or isinstance(raw_value, bool):
        raise ValueError("Token does not identify a user")
    try:
        return int(raw_value)
    except (TypeError, ValueError) as exc:
        raise ValueError("Token does not identify a user") from exc


__all__ = ["create_access_token", "decode_access_token", "user_id_from_claims"]
