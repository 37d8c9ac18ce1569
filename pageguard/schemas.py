import logging
import math
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from pageguard.core.reasons import Reason

logger = logging.getLogger(__name__)

# ==========================================
# 🧱 SHARED HELPERS
# ==========================================

def _first_str(data: Mapping, *keys: str) -> str:
    """First truthy string value among ``keys``; non-strings count as missing."""
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return ''


def _first_list(data: Mapping, *keys: str) -> list:
    for key in keys:
        value = data.get(key)
        if isinstance(value, (list, tuple)):
            return list(value)
    return []


def _normalize_text(value: str) -> str:
    return (value or '').strip().lower()


def _as_number(value: Any) -> Optional[float]:
    """
    Finite number from an int, float or numeric string. Booleans, NaN,
    infinities and anything else count as missing.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, float) and math.isfinite(value):
        return value
    return None


# ==========================================
# 📥 PAGE SNAPSHOT MODELS
# ==========================================

class FormDescriptor(BaseModel):
    """A form captured from the page. Wrong-typed fields fall back to safe defaults."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    action: str = ''
    method: str = ''
    input_count: int = Field(default=0, alias='inputCount')
    has_password: bool = Field(default=False, alias='hasPassword')

    @model_validator(mode='before')
    @classmethod
    def _coerce(cls, data: Any) -> Any:
        if isinstance(data, FormDescriptor):
            return data.model_dump()
        if not isinstance(data, Mapping):
            return {}

        count = _as_number(data.get('inputCount', data.get('input_count')))
        count = max(0, int(count)) if count is not None else 0

        method = data.get('method')
        return {
            'action': _first_str(data, 'action'),
            'method': method.lower() if isinstance(method, str) else '',
            'input_count': count,
            'has_password': bool(data.get('hasPassword', data.get('has_password'))),
        }


class PagePayload(BaseModel):
    """
    Snapshot of a page produced by the collector.

    Accepts the collector's camelCase keys as well as the older aliases it
    used to send (``handle``/``user``, ``fullName``/``title``,
    ``pageUrl``/``origin``, ``linkList``, ``formList``, ``canonical``).
    Anything that is not a mapping becomes an empty payload; inside a
    mapping each wrong-typed field falls back to its default on its own.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str = ''
    hostname: str = ''
    username: str = ''
    display_name: str = Field(default='', alias='displayName')
    is_verified: bool = Field(default=False, alias='isVerified')
    is_brand: bool = Field(default=False, alias='isBrand')
    # Entries of the wrong type are kept and scored as malformed
    links: List[Any] = []
    forms: List[Optional[FormDescriptor]] = []
    text_sample: str = Field(default='', alias='textSample')
    canonical_url: Optional[str] = Field(default=None, alias='canonicalUrl')
    og_url: Optional[str] = Field(default=None, alias='ogUrl')
    timestamp: Optional[int] = None

    @model_validator(mode='before')
    @classmethod
    def _coerce(cls, data: Any) -> Any:
        if isinstance(data, PagePayload):
            return data.model_dump()
        if not isinstance(data, Mapping):
            return {}

        timestamp = _as_number(data.get('timestamp'))

        return {
            'url': _first_str(data, 'url', 'pageUrl', 'origin'),
            'hostname': _first_str(data, 'hostname'),
            'username': _normalize_text(_first_str(data, 'username', 'handle', 'user')).removeprefix('@'),
            'display_name': _normalize_text(
                _first_str(data, 'displayName', 'display_name', 'fullName', 'title')),
            'is_verified': bool(data.get('isVerified', data.get('is_verified'))),
            'is_brand': bool(data.get('isBrand', data.get('is_brand'))),
            'links': _first_list(data, 'links', 'linkList'),
            'forms': _first_list(data, 'forms', 'formList'),
            'text_sample': _first_str(data, 'textSample', 'text_sample'),
            'canonical_url': _first_str(data, 'canonicalUrl', 'canonical_url', 'canonical') or None,
            'og_url': _first_str(data, 'ogUrl', 'og_url') or None,
            'timestamp': int(timestamp) if timestamp is not None else None,
        }

    @classmethod
    def coerce(cls, data: Any) -> "PagePayload":
        """Validate ``data``, scoring it as an empty page if it still cannot be used"""
        if isinstance(data, cls):
            return data
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Unusable page payload, scoring as empty page: {e}")
            return cls()


# ==========================================
# 📤 RESULT MODELS
# ==========================================

class AssessmentDetails(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    username: str = ''
    display_name: str = Field(default='', alias='displayName')
    is_verified: bool = Field(default=False, alias='isVerified')
    is_brand: bool = Field(default=False, alias='isBrand')
    page_hostname: str = Field(default='', alias='pageHostname')
    url: str = ''
    links_count: int = Field(default=0, alias='linksCount')
    forms_count: int = Field(default=0, alias='formsCount')


class AssessmentResult(BaseModel):
    """Verdict for one page. ``reasons`` is the rendered text of ``findings``."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    suspicious: bool
    score: float = Field(ge=0.0, le=1.0)
    reasons: List[str] = []
    findings: List[Reason] = []
    details: AssessmentDetails = AssessmentDetails()


# ==========================================
# 🌐 API MODELS
# ==========================================

class LinkCheckRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    link: str
    page_hostname: str = Field(default='', alias='pageHostname')


class LinkCheckResponse(BaseModel):
    risk: float
    reason: Optional[Reason] = None


class TrustedDomainRequest(BaseModel):
    domain: str


class TrustedDomainsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    domains: List[str]
    registered_domains: List[str] = Field(alias='registeredDomains')


class SettingsDocument(BaseModel):
    """Export format shared with the options page"""
    model_config = ConfigDict(populate_by_name=True)

    trusted_domains: List[str] = Field(default=[], alias='trustedDomains')
    enabled_sites: Dict[str, Any] = Field(default={}, alias='enabledSites')
    show_inline_badge: bool = Field(default=False, alias='showInlineBadge')


class AlertRequest(BaseModel):
    id: str = ''
    origin: str = ''
    msg: str = 'Possible phishing detected'
    result: Optional[Dict[str, Any]] = None


class Notification(BaseModel):
    title: str
    message: str


class AlertResponse(BaseModel):
    ok: bool = True
    notified: bool
    notification: Optional[Notification] = None


class StoredResultResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    hostname: str
    result: AssessmentResult
    assessed_at: Optional[datetime] = Field(default=None, alias='assessedAt')
