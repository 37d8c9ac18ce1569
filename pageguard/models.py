from sqlalchemy import Column, Integer, String, DateTime, JSON, Float, Boolean
from datetime import datetime
from pageguard.database import Base


class TrustedDomain(Base):
    __tablename__ = "trusted_domains"

    id = Column(Integer, primary_key=True, index=True)
    domain = Column(String(255), unique=True, index=True, nullable=False)

    # Insertion order; typosquat ties go to the earliest entry
    position = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)


class SiteSetting(Base):
    __tablename__ = "site_settings"

    key = Column(String(100), primary_key=True)
    value = Column(JSON)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class SiteAssessment(Base):
    """Last assessment stored per page hostname"""
    __tablename__ = "site_assessments"

    id = Column(Integer, primary_key=True, index=True)
    hostname = Column(String(255), unique=True, index=True, nullable=False)

    suspicious = Column(Boolean, default=False, index=True)
    score = Column(Float, default=0.0)
    url = Column(String(2048))

    # Full AssessmentResult as returned by the scorer
    result = Column(JSON)

    assessed_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
