import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import mapped_column, relationship

from clubhub.models.db import Base


class ResourceType(str, enum.Enum):
    DOCUMENT = "document"
    VIDEO = "video"
    LINK = "link"


class ResourceDomain(str, enum.Enum):
    WEB_DEVELOPMENT = "Web Development"
    AI_ML = "AI and ML"
    DATA_SCIENCE = "Data Science"
    CYBERSECURITY = "Cybersecurity"
    CLOUD_COMPUTING = "Cloud Computing"
    DEVOPS = "DevOps"
    BLOCKCHAIN = "Blockchain"
    UI_UX = "UI/UX Design"
    COMPETITIVE_PROGRAMMING = "Competitive Programming"
    ROBOTICS_IOT = "Robotics and IoT"
    CREATIVITY = "Creativity"
    OUTREACH = "Outreach"
    OTHER = "Other"


def _values(enum_cls):
    return [member.value for member in enum_cls]


class Resource(Base):
    __tablename__ = "resources"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4, unique=True, nullable=False)
    title = mapped_column(String(255), nullable=False)
    description = mapped_column(Text, nullable=False)
    url = mapped_column(String, nullable=False)
    type = mapped_column(Enum(ResourceType, values_callable=_values), nullable=False)
    domain = mapped_column(Enum(ResourceDomain, values_callable=_values), nullable=True)
    uploaded_by = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = mapped_column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    updated_at = mapped_column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC), nullable=False)

    uploader = relationship("User", back_populates="resources")

    def __str__(self) -> str:
        return self.title
