"""
Token di identità. Il motore non autentica nessuno: legge solo l'entità che
agisce dal claim "sub". create_access_token serve a chi emette i token in
sviluppo e nei test.
"""
from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from ..config import settings

ALGO = "HS256"
TOKEN_TYPE = "entity"

def create_access_token(entity_id: str, expires_min: int | None = None) -> str:
    minutes = expires_min if expires_min is not None else settings.JWT_EXPIRES_MIN
    exp = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    payload = {"sub": entity_id, "typ": TOKEN_TYPE, "exp": exp}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGO)

def decode_token(token: str) -> dict | None:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGO])
    except JWTError:
        return None

def entity_from_token(token: str) -> str | None:
    """Entità del token, None se firma/scadenza/claim non tornano."""
    data = decode_token(token)
    if not data or not data.get("sub"):
        return None
    # "typ" assente = ammesso
    if data.get("typ", TOKEN_TYPE) != TOKEN_TYPE:
        return None
    return str(data["sub"])
