from sqlmodel import SQLModel, Field
from typing import Optional, Tuple
from datetime import datetime
from sqlalchemy import UniqueConstraint


class Conversation(SQLModel, table=True):
    # participants are stored sorted so a pair maps to one row
    __table_args__ = (UniqueConstraint("participant_one_id", "participant_two_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    participant_one_id: int = Field(foreign_key="user.id", index=True)
    participant_two_id: int = Field(foreign_key="user.id", index=True)
    artwork_id: Optional[int] = Field(default=None, foreign_key="artwork.id")

    last_message_id: Optional[int] = None
    last_message_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @staticmethod
    def participants_for(a: int, b: int) -> Tuple[int, int]:
        return (a, b) if a < b else (b, a)

    def has_participant(self, user_id: int) -> bool:
        return user_id in (self.participant_one_id, self.participant_two_id)

    def other_participant(self, user_id: int) -> int:
        if user_id == self.participant_one_id:
            return self.participant_two_id
        return self.participant_one_id


class Message(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    conversation_id: int = Field(foreign_key="conversation.id", index=True)
    sender_id: int = Field(foreign_key="user.id")
    receiver_id: int = Field(foreign_key="user.id", index=True)
    artwork_id: Optional[int] = Field(default=None, foreign_key="artwork.id")
    content: str = Field(max_length=1000)
    read: bool = Field(default=False)
    read_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
