from pydantic import BaseModel

class Actor(BaseModel):
    # The user id is the subject ("sub") claim of the bearer token
    id: str
    is_admin: bool = False
