from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from callspend.database import Base

CALLER_MAX_LENGTH = 20
RESULT_MAX_LENGTH = 50
SERVICE_MAX_LENGTH = 255
FILE_NAME_MAX_LENGTH = 255


class Upload(Base):
    __tablename__ = "uploads"

    id = Column(Integer, primary_key=True, index=True)
    file_name = Column(String(FILE_NAME_MAX_LENGTH), nullable=False)
    upload_date = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    records = relationship(
        "CallRecord",
        back_populates="upload",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class CallRecord(Base):
    __tablename__ = "call_records"

    id = Column(Integer, primary_key=True, index=True)
    upload_id = Column(
        Integer,
        ForeignKey("uploads.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    call_date = Column(DateTime, nullable=False)
    caller = Column(String(CALLER_MAX_LENGTH), nullable=False, index=True)
    receiver = Column(String(CALLER_MAX_LENGTH), nullable=False)
    duration = Column(Integer, nullable=False, default=0)
    result = Column(String(RESULT_MAX_LENGTH), nullable=False, default="")
    cost = Column(Numeric(10, 2), nullable=False, default=0)
    service = Column(String(SERVICE_MAX_LENGTH), nullable=False, default="")

    upload = relationship("Upload", back_populates="records")
