from pydantic import BaseModel, Field
from datetime import datetime
from uuid import UUID
from .db_models import User

class UserSessionRedis(BaseModel):
    """
    Represents a signed-in user's session stored in Redis.
    """
    user_data: User = Field(..., description="The account as it was read from the database at login.")
    session_id: UUID = Field(..., description="Unique ID for this specific session.")
    session_start_time: datetime = Field(..., description="The time this session began.")
    session_end_time: datetime = Field(..., description="The time this session will expire.")
