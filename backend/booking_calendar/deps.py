from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .core.security import entity_from_token

bearer = HTTPBearer(auto_error=False)

def get_current_entity(creds: HTTPAuthorizationCredentials | None = Depends(bearer)) -> str:
    """
    Contesto di identità opaco: il token è emesso altrove, qui si legge solo
    l'entità che agisce (claim "sub"). Nessuna autorizzazione oltre a questo.
    """
    if creds is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token mancante")
    entity_id = entity_from_token(creds.credentials)
    if entity_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return entity_id

def get_optional_entity(creds: HTTPAuthorizationCredentials | None = Depends(bearer)) -> str | None:
    """Come get_current_entity, ma senza token il chiamante è anonimo (None)."""
    if creds is None:
        return None
    return get_current_entity(creds)
