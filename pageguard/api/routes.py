import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pageguard.config import settings
from pageguard.core.risk_scorer import assess_link
from pageguard.database import get_db
from pageguard.schemas import (
    AlertRequest,
    AlertResponse,
    LinkCheckRequest,
    LinkCheckResponse,
    SettingsDocument,
    StoredResultResponse,
    TrustedDomainRequest,
    TrustedDomainsResponse,
)
from pageguard.services.analysis_service import AnalysisService
from pageguard.services.notifier import AlertRateLimiter, NotificationService
from pageguard.services.trust_store import TrustedDomainStore

logger = logging.getLogger(__name__)

router = APIRouter()

notification_service = NotificationService(AlertRateLimiter(settings.MAX_ALERTS_PER_ID))


def _trusted_response(store: TrustedDomainStore) -> TrustedDomainsResponse:
    return TrustedDomainsResponse(
        domains=store.list_domains(),
        registered_domains=list(store.trusted_set()),
    )

# ============================================================================
# ANALYSIS ENDPOINTS
# ============================================================================

@router.post("/analyze", response_model=dict)
def analyze_page(payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Score a captured page snapshot"""
    try:
        service = AnalysisService(db)
        result = service.analyze_page(payload)
    except SQLAlchemyError as e:
        logger.error(f"❌ Error in /analyze: {e}")
        raise HTTPException(status_code=500, detail=f"Analysis failed: {str(e)}")

    return {
        "status": "success",
        "result": result.model_dump(mode="json", by_alias=True),
    }


@router.post("/analyze-link", response_model=LinkCheckResponse)
def analyze_link(request: LinkCheckRequest):
    """Score a single link as it would be scored on the given page"""
    risk, reason = assess_link(request.link, request.page_hostname)
    return LinkCheckResponse(risk=risk, reason=reason)


@router.get("/results/{hostname}", response_model=StoredResultResponse, response_model_by_alias=True)
def get_last_result(hostname: str, db: Session = Depends(get_db)):
    """Last stored assessment for a hostname"""
    stored = AnalysisService(db).get_last_result(hostname)
    if stored is None:
        raise HTTPException(status_code=404, detail=f"No assessment stored for {hostname}")
    return stored

# ============================================================================
# TRUSTED DOMAINS
# ============================================================================

@router.get("/trusted-domains", response_model=TrustedDomainsResponse)
def list_trusted_domains(db: Session = Depends(get_db)):
    return _trusted_response(TrustedDomainStore(db))


@router.post("/trusted-domains", response_model=TrustedDomainsResponse)
def add_trusted_domain(request: TrustedDomainRequest, db: Session = Depends(get_db)):
    store = TrustedDomainStore(db)
    try:
        store.add(request.domain)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _trusted_response(store)


@router.post("/trusted-domains/restore", response_model=TrustedDomainsResponse)
def restore_trusted_domains(db: Session = Depends(get_db)):
    store = TrustedDomainStore(db)
    store.restore_defaults()
    return _trusted_response(store)


@router.delete("/trusted-domains/{domain}", response_model=TrustedDomainsResponse)
def remove_trusted_domain(domain: str, db: Session = Depends(get_db)):
    store = TrustedDomainStore(db)
    if not store.remove(domain):
        raise HTTPException(status_code=404, detail=f"{domain} is not a trusted domain")
    return _trusted_response(store)


@router.delete("/trusted-domains", response_model=TrustedDomainsResponse)
def clear_trusted_domains(db: Session = Depends(get_db)):
    store = TrustedDomainStore(db)
    store.clear()
    return _trusted_response(store)

# ============================================================================
# SETTINGS IMPORT / EXPORT
# ============================================================================

@router.get("/settings/export", response_model=SettingsDocument, response_model_by_alias=True)
def export_settings(db: Session = Depends(get_db)):
    return TrustedDomainStore(db).export_settings()


@router.post("/settings/import", response_model=SettingsDocument, response_model_by_alias=True)
def import_settings(document: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    try:
        return TrustedDomainStore(db).import_settings(document)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

# ============================================================================
# ALERTS
# ============================================================================

@router.post("/alerts", response_model=AlertResponse)
def create_alert(request: AlertRequest):
    """Build a notification for a suspicious page or link, at most MAX_ALERTS_PER_ID per alert id"""
    notification = notification_service.notify(
        alert_id=request.id,
        origin=request.origin,
        result=request.result,
        raw_msg=request.msg,
    )
    return AlertResponse(ok=True, notified=notification is not None, notification=notification)
