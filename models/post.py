from sqlalchemy import Column, String, Text, Index

from models.base_model import BaseModel, Base


class Post(BaseModel, Base):
    __tablename__ = "posts"

    username = Column(String(30), nullable=False)
    title = Column(Text, nullable=False)

    __table_args__ = (
        Index("ix_posts_username", "username"),
    )
