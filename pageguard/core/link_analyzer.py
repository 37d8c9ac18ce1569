import logging
from typing import List, NamedTuple, Optional, Sequence, Tuple

from pageguard.core.domain_utils import is_ip_address, is_punycode, split_url, tld_of
from pageguard.core.reasons import Reason, ReasonKind

logger = logging.getLogger(__name__)

MAX_LINKS_ANALYZED = 40


class LinkAggregate(NamedTuple):
    contribution: float
    reasons: List[Reason]
    forces_suspicion: bool


class LinkAnalyzer:
    """
    Per-link heuristics. Rules are evaluated in a fixed order and the first
    one that matches decides the link's risk.
    """

    def __init__(self):
        self.risky_tlds = {
            'xyz', 'top', 'club', 'pw', 'icu', 'work', 'gq', 'cf',
            'tk', 'ml', 'ga', 'biz', 'click', 'win', 'loan', 'party',
        }

        # Order matters: the first token found in the path is reported
        self.suspicious_path_tokens = [
            'verify', 'confirm', 'signin', 'login',
            'account', 'secure', 'billing', 'payment',
        ]

        self.brand_tokens = ['secure', 'login', 'paypal', 'bank', 'apple', 'google', 'microsoft']

        self.max_contribution_trusted = 0.15
        self.max_contribution = 0.40
        self.suspicion_threshold = 0.30

    def assess_link(self, link, page_hostname: str) -> Tuple[float, Optional[Reason]]:
        """Return ``(risk, reason)`` for a single link found on the page."""
        base = 'https://' + (page_hostname or 'example.com')
        try:
            if not isinstance(link, str):
                raise ValueError(f"link is not a string: {link!r}")
            host, parts = split_url(link, base=base)
        except ValueError:
            return 0.05, Reason(
                kind=ReasonKind.LINK_MALFORMED,
                text=f'Malformed/relative link flagged: {link}',
                weight=0.05,
            )

        path = (parts.path or '').lower()

        if not host:
            return 0.02, Reason(kind=ReasonKind.LINK_EMPTY_HOST,
                                text=f'Empty host for link: {link}', weight=0.02)

        if is_ip_address(host):
            return 0.20, Reason(kind=ReasonKind.LINK_IP_ADDRESS,
                                text=f'Link uses raw IP address ({host})', weight=0.20)

        if is_punycode(host):
            return 0.18, Reason(kind=ReasonKind.LINK_PUNYCODE,
                                text=f'Link contains punycode domain ({host})', weight=0.18)

        tld = tld_of(host)
        if tld in self.risky_tlds:
            return 0.12, Reason(kind=ReasonKind.LINK_RISKY_TLD,
                                text=f'Link uses uncommon TLD .{tld} ({host})', weight=0.12)

        for token in self.suspicious_path_tokens:
            if token in path:
                return 0.10, Reason(
                    kind=ReasonKind.LINK_SUSPICIOUS_PATH,
                    text=f'Link path contains suspicious token "{token}" ({parts.path})',
                    weight=0.10,
                )

        if host != page_hostname:
            for token in self.brand_tokens:
                if token in host:
                    return 0.14, Reason(
                        kind=ReasonKind.LINK_BRAND_TOKEN,
                        text=f'External link appears to impersonate brand token "{token}" ({host})',
                        weight=0.14,
                    )

        return 0.0, None

    def aggregate(self, links: Sequence, page_hostname: str, trusted_exact: bool) -> LinkAggregate:
        """
        Mean risk of the first MAX_LINKS_ANALYZED links, divided by the total
        number of links supplied and capped by trust level.
        """
        reasons = []
        risk_sum = 0.0
        for link in links[:MAX_LINKS_ANALYZED]:
            risk, reason = self.assess_link(link, page_hostname)
            risk_sum += risk
            if reason is not None:
                reasons.append(reason)

        ceiling = self.max_contribution_trusted if trusted_exact else self.max_contribution
        contribution = min(ceiling, risk_sum / max(1, len(links)))
        if len(links) > MAX_LINKS_ANALYZED:
            logger.debug(f"Analyzed {MAX_LINKS_ANALYZED} of {len(links)} links")
        return LinkAggregate(contribution, reasons, contribution >= self.suspicion_threshold)
