from fastapi import Depends, HTTPException, status

from arena.core import security
from arena.core.database import SessionLocal
from arena.core.logging_config import bind_context
from arena.schemas.auth_schemas import Actor

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_current_actor(token: str = Depends(security.oauth2_scheme)) -> Actor:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    actor = security.verify_token(token, credentials_exception)
    bind_context(actor_id=actor.id)
    return actor

def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Administrator privileges required")
    return actor
