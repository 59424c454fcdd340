from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime
from uuid import uuid4
from marketplace.utils.clock import utc_now


class User(SQLModel, table=True):
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    role: str = Field(default="buyer")  # buyer | seller
    can_login: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
