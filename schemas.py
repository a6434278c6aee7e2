"""
Database Schemas for DevConnector

Each Pydantic model corresponds to a MongoDB collection or to a document
embedded inside one. Collection name is the lowercase class name
(e.g., User -> "user"). Embedded entries carry their own `_id`.
"""
from datetime import datetime, timezone
from typing import List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, EmailStr, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    def to_mongo(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class User(Document):
    name: str = Field(..., description="Display name")
    email: EmailStr = Field(..., description="Email address (unique)")
    password: str = Field(..., description="Hashed password")
    avatar: Optional[str] = Field(None, description="Gravatar URL")
    date: datetime = Field(default_factory=utcnow)


class Social(Document):
    youtube: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None
    devpost: Optional[str] = None


class Experience(Document):
    id: ObjectId = Field(default_factory=ObjectId, alias="_id")
    title: str
    company: str
    location: Optional[str] = None
    from_: str = Field(..., alias="from", description="Start date as submitted")
    to: Optional[str] = None
    current: bool = False
    description: Optional[str] = None


class Education(Document):
    id: ObjectId = Field(default_factory=ObjectId, alias="_id")
    school: str
    degree: str
    fieldofstudy: str
    location: Optional[str] = None
    from_: str = Field(..., alias="from", description="Start date as submitted")
    to: Optional[str] = None
    current: bool = False
    description: Optional[str] = None


class Profile(Document):
    user: ObjectId = Field(..., description="Owning user (unique)")
    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    status: Optional[str] = None
    githubusername: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    social: Social = Field(default_factory=Social)
    experience: List[Experience] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    date: datetime = Field(default_factory=utcnow)


class Like(Document):
    id: ObjectId = Field(default_factory=ObjectId, alias="_id")
    user: ObjectId


class Comment(Document):
    id: ObjectId = Field(default_factory=ObjectId, alias="_id")
    user: ObjectId
    text: str
    name: Optional[str] = Field(None, description="Author name at comment time")
    avatar: Optional[str] = Field(None, description="Author avatar at comment time")
    date: datetime = Field(default_factory=utcnow)


class Post(Document):
    user: ObjectId
    text: str
    name: Optional[str] = Field(None, description="Author name at creation time")
    avatar: Optional[str] = Field(None, description="Author avatar at creation time")
    ispublic: bool = True
    likes: List[Like] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)
    date: datetime = Field(default_factory=utcnow)
