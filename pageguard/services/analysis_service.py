import time
import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from pageguard.core.risk_scorer import RiskScorer
from pageguard.models import SiteAssessment
from pageguard.schemas import AssessmentResult, PagePayload, StoredResultResponse
from pageguard.services.trust_store import TrustedDomainStore

logger = logging.getLogger(__name__)


class AnalysisService:
    def __init__(self, db: Session):
        self.db = db
        self.trust_store = TrustedDomainStore(db)
        self.risk_scorer = RiskScorer()

    def analyze_page(self, payload: Any) -> AssessmentResult:
        """Score a page snapshot against the stored trusted domains and remember the result"""
        start_time = time.time()

        page = PagePayload.coerce(payload)
        trusted = self.trust_store.trusted_set()
        result = self.risk_scorer.assess(page, trusted)

        hostname = result.details.page_hostname
        if hostname:
            self._save_result(hostname, result)

        processing_time = time.time() - start_time
        if result.suspicious:
            logger.warning(f"⚠️ SUSPICIOUS page: {hostname or page.url} "
                           f"(score {result.score:.2f}, {len(result.reasons)} reasons)")
        else:
            logger.info(f"✓ Clean page: {hostname or page.url} "
                        f"(score {result.score:.2f}) in {processing_time * 1000:.1f}ms")
        return result

    def get_last_result(self, hostname: str) -> Optional[StoredResultResponse]:
        row = self.db.query(SiteAssessment).filter(SiteAssessment.hostname == hostname.lower()).first()
        if not row:
            return None
        return StoredResultResponse(
            hostname=row.hostname,
            result=AssessmentResult.model_validate(row.result),
            assessed_at=row.assessed_at,
        )

    def _save_result(self, hostname: str, result: AssessmentResult) -> SiteAssessment:
        row = self.db.query(SiteAssessment).filter(SiteAssessment.hostname == hostname).first()
        if row is None:
            row = SiteAssessment(hostname=hostname)
            self.db.add(row)

        row.suspicious = result.suspicious
        row.score = result.score
        row.url = result.details.url
        row.result = result.model_dump(mode="json")
        row.assessed_at = datetime.utcnow()

        self.db.commit()
        return row
