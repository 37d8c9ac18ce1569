import logging
import re
from typing import Any, Iterable, List, Optional, Tuple

from pageguard.core.domain_utils import (
    hostname_of,
    is_ip_address,
    is_punycode,
    registered_domain,
    strip_www,
)
from pageguard.core.form_analyzer import FormAnalyzer
from pageguard.core.link_analyzer import LinkAnalyzer
from pageguard.core.reasons import Reason, ReasonKind
from pageguard.core.similarity import check_brand_keywords, check_typosquat, normalized_distance
from pageguard.core.text_analyzer import TextAnalyzer
from pageguard.schemas import AssessmentDetails, AssessmentResult, PagePayload

logger = logging.getLogger(__name__)

_HTTPS_RE = re.compile(r'^https:', re.IGNORECASE)


class RiskScorer:
    def __init__(self):
        """
        Rule-based page scorer. The instance only holds constant tables, so a
        single scorer can be shared between threads.
        """
        self.link_analyzer = LinkAnalyzer()
        self.form_analyzer = FormAnalyzer()
        self.text_analyzer = TextAnalyzer()

        self.base_score_trusted = 0.02
        self.base_score = 0.25
        self.insecure_transport_weight = 0.20
        self.hostname_weight = 0.40
        self.canonical_mismatch_threshold = 0.35
        self.canonical_mismatch_weight = 0.12
        self.canonical_mismatch_weight_trusted = 0.20

        # Ceiling for trusted pages that raised no suspicion
        self.trusted_score_cap = 0.05
        self.suspicious_threshold = 0.55

    def assess(self, payload: Any, trusted_domains: Iterable[str]) -> AssessmentResult:
        """
        Score a page snapshot against a set of trusted registered domains.

        ``trusted_domains`` must already be normalized to registered-domain
        form. Its iteration order breaks typosquat ties. Malformed payloads
        never raise; they are scored as empty pages.

        Step order (and whether a step raises a floor or adds) is part of the
        contract:

          1. base score by trust
          2. typosquat / brand keywords (floors, untrusted pages only)
          3. HTTPS
          4. forms
          5. links
          6. page text
          7. punycode / IP hostname
          8. canonical / Open Graph URL
          9. trust dampening
         10. clamp, then threshold
        """
        page = PagePayload.coerce(payload)
        trusted = tuple(trusted_domains or ())
        trusted_set = frozenset(trusted)

        url = page.url
        page_hostname = hostname_of(url) or hostname_of(page.hostname)
        current_reg = registered_domain(page_hostname).lower()
        trusted_exact = bool(page_hostname) and current_reg in trusted_set

        findings: List[Reason] = []
        score = self.base_score_trusted if trusted_exact else self.base_score
        suspicious = False

        # ===== 1. TYPOSQUAT & BRAND KEYWORDS =====
        if trusted_exact:
            findings.append(Reason(kind=ReasonKind.TRUSTED_DOMAIN,
                                   text='Exact registered domain is trusted'))
        else:
            try:
                for outcome in (check_typosquat(page_hostname, trusted),
                                check_brand_keywords(page_hostname)):
                    findings.extend(outcome.reasons)
                    if outcome.suspicious:
                        suspicious = True
                        score = max(score, outcome.score_floor)
            except Exception as e:
                logger.error(f"Typosquat check failed for {page_hostname!r}: {e}")
                findings.append(Reason(kind=ReasonKind.TYPOSQUAT_ERROR,
                                       text='Error during typosquat check'))

        # ===== 2. HTTPS =====
        if not _HTTPS_RE.match(url):
            findings.append(Reason(kind=ReasonKind.INSECURE_TRANSPORT,
                                   text='Page not served over HTTPS',
                                   weight=self.insecure_transport_weight))
            score += self.insecure_transport_weight
            if trusted_exact and not suspicious:
                score = min(score, self.trusted_score_cap)

        # ===== 3. FORMS =====
        form_result = self.form_analyzer.analyze(page.forms, page_hostname, trusted_exact)
        for finding in form_result.findings:
            findings.append(finding)
            score += finding.weight
        suspicious = suspicious or form_result.suspicious

        # ===== 4. LINKS =====
        if page.links:
            link_result = self.link_analyzer.aggregate(page.links, page_hostname, trusted_exact)
            findings.extend(link_result.reasons)
            score += link_result.contribution
            if link_result.forces_suspicion:
                suspicious = True

        # ===== 5. PAGE TEXT =====
        text_result = self.text_analyzer.analyze(page.text_sample, trusted_exact)
        for finding in text_result.findings:
            findings.append(finding)
            score += finding.weight
        suspicious = suspicious or text_result.suspicious

        # ===== 6. HOSTNAME =====
        if is_punycode(page_hostname):
            findings.append(Reason(kind=ReasonKind.PUNYCODE_HOSTNAME,
                                   text='Page hostname uses punycode',
                                   weight=self.hostname_weight))
            score += self.hostname_weight
            suspicious = True
        if is_ip_address(page_hostname):
            findings.append(Reason(kind=ReasonKind.IP_HOSTNAME,
                                   text='Page served from IP address',
                                   weight=self.hostname_weight))
            score += self.hostname_weight
            suspicious = True

        # ===== 7. CANONICAL / OPEN GRAPH =====
        canonical = page.og_url or page.canonical_url
        if canonical:
            mismatch = self._check_canonical(canonical, page_hostname, trusted_exact)
            if mismatch is not None:
                findings.append(mismatch)
                if mismatch.kind == ReasonKind.CANONICAL_MISMATCH:
                    score += mismatch.weight
                    suspicious = True

        # ===== 8. TRUST DAMPENING =====
        if trusted_exact and not suspicious:
            findings = [f for f in findings if not f.kind.is_weak]
            score = min(score, self.trusted_score_cap)

        score = max(0.0, min(1.0, score))
        suspicious = suspicious or score >= self.suspicious_threshold

        logger.debug(f"Assessed {page_hostname or '<no host>'}: score={score:.2f} suspicious={suspicious}")

        return AssessmentResult(
            suspicious=suspicious,
            score=score,
            reasons=[f.text for f in findings],
            findings=findings,
            details=AssessmentDetails(
                username=page.username,
                display_name=page.display_name,
                is_verified=page.is_verified,
                is_brand=page.is_brand,
                page_hostname=page_hostname,
                url=url,
                links_count=len(page.links),
                forms_count=len(page.forms),
            ),
        )

    def assess_link(self, link: str, page_hostname: str) -> Tuple[float, Optional[Reason]]:
        return self.link_analyzer.assess_link(link, page_hostname)

    def _check_canonical(self, canonical: str, page_hostname: str,
                         trusted_exact: bool) -> Optional[Reason]:
        """Compare the canonical/OG host with the page host. None when either is missing."""
        canonical_host = hostname_of(canonical)
        if not canonical_host or not page_hostname:
            return None

        dist = normalized_distance(strip_www(canonical_host), strip_www(page_hostname))
        if dist > self.canonical_mismatch_threshold:
            weight = self.canonical_mismatch_weight_trusted if trusted_exact else self.canonical_mismatch_weight
            return Reason(kind=ReasonKind.CANONICAL_MISMATCH,
                          text=f'Canonical/OG domain mismatch (normalized distance {dist:.2f})',
                          weight=weight)
        if not trusted_exact:
            return Reason(kind=ReasonKind.CANONICAL_MATCH, text='Canonical/OG domain matches page')
        return None


_default_scorer = RiskScorer()


def assess(payload: Any, trusted_domains: Iterable[str]) -> AssessmentResult:
    """Score ``payload`` with the shared default scorer."""
    return _default_scorer.assess(payload, trusted_domains)


def assess_link(link: str, page_hostname: str) -> Tuple[float, Optional[Reason]]:
    return _default_scorer.assess_link(link, page_hostname)
