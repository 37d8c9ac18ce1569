import logging
from typing import Callable, Iterable, List, NamedTuple, Optional, Tuple

from pageguard.core.domain_utils import registered_domain, second_level_label
from pageguard.core.reasons import Reason, ReasonKind

logger = logging.getLogger(__name__)

TYPOSQUAT_DISTANCE_THRESHOLD = 0.30  # smaller => stricter
TYPOSQUAT_SCORE_FLOOR = 0.75
BRAND_KEYWORD_SCORE_FLOOR = 0.65

BRAND_KEYWORDS = {
    'facebook': ['faceb', 'fbk', 'fb', 'facebok', 'faceboek', 'faceboook'],
    'tiktok': ['tiktok', 'ttk', 'tik-tok'],
}


class SimilarityOutcome(NamedTuple):
    reasons: List[Reason]
    suspicious: bool
    score_floor: float  # 0.0 when nothing matched


def edit_distance(a: str = '', b: str = '') -> int:
    """Levenshtein distance between two strings"""
    if a == b:
        return 0
    if len(a) < len(b):
        return edit_distance(b, a)
    if len(b) == 0:
        return len(a)

    previous_row = list(range(len(b) + 1))
    for i, c1 in enumerate(a):
        current_row = [i + 1]
        for j, c2 in enumerate(b):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row
    return previous_row[-1]


def normalized_distance(a: str = '', b: str = '') -> float:
    """Edit distance scaled by the longer string, in [0, 1]"""
    a = str(a or '')
    b = str(b or '')
    return edit_distance(a, b) / max(len(a), len(b), 1)


def closest_match(candidate: str,
                  trusted: Iterable[str],
                  key: Callable[[str], str] = lambda d: d) -> Tuple[Optional[str], float]:
    """
    Return ``(trusted_domain, distance)`` for the closest entry, comparing
    ``candidate`` against ``key(entry)``. The first entry wins ties. When no
    entry is closer than 1.0 the domain is None.
    """
    best_domain, best_dist = None, 1.0
    for domain in trusted:
        dist = normalized_distance(candidate, key(domain))
        if dist < best_dist:
            best_domain, best_dist = domain, dist
    return best_domain, best_dist


def check_typosquat(page_hostname: str, trusted: Tuple[str, ...]) -> SimilarityOutcome:
    """
    Compare the page against every trusted domain, second-level label first,
    then the full registered domain.
    """
    current_reg = registered_domain(page_hostname).lower()
    current_sld = second_level_label(page_hostname)

    best_domain, best_dist = closest_match(current_sld, trusted, key=second_level_label)
    if best_domain and best_dist <= TYPOSQUAT_DISTANCE_THRESHOLD:
        best_sld = second_level_label(best_domain)
        logger.debug(f"SLD typosquat: {current_sld} ~ {best_sld} ({best_dist:.2f})")
        reason = Reason(
            kind=ReasonKind.TYPOSQUAT,
            text=(f'Domain SLD "{current_sld}" closely resembles trusted SLD "{best_sld}" '
                  f'(distance {best_dist:.2f}). Treated as typosquat '
                  f'({current_reg} ~ {best_domain}).'),
            weight=TYPOSQUAT_SCORE_FLOOR,
        )
        return SimilarityOutcome([reason], True, TYPOSQUAT_SCORE_FLOOR)

    best_domain, best_dist = closest_match(current_reg, trusted)
    if best_domain and best_dist <= TYPOSQUAT_DISTANCE_THRESHOLD:
        logger.debug(f"Registered-domain typosquat: {current_reg} ~ {best_domain} ({best_dist:.2f})")
        reason = Reason(
            kind=ReasonKind.TYPOSQUAT,
            text=(f'Registered domain "{current_reg}" somewhat resembles trusted domain '
                  f'"{best_domain}" (distance {best_dist:.2f}).'),
            weight=TYPOSQUAT_SCORE_FLOOR,
        )
        return SimilarityOutcome([reason], True, TYPOSQUAT_SCORE_FLOOR)

    return SimilarityOutcome(
        [Reason(kind=ReasonKind.NO_SIMILARITY, text='No similarity to trusted domains detected')],
        False,
        0.0,
    )


def check_brand_keywords(page_hostname: str) -> SimilarityOutcome:
    """Flag every brand keyword contained in the page's second-level label."""
    current_sld = second_level_label(page_hostname)
    reasons = []
    if current_sld:
        for brand, keywords in BRAND_KEYWORDS.items():
            for keyword in keywords:
                if keyword in current_sld:
                    reasons.append(Reason(
                        kind=ReasonKind.BRAND_KEYWORD,
                        text=(f'Domain SLD "{current_sld}" contains brand-like token '
                              f'"{keyword}" (looks like {brand})'),
                        weight=BRAND_KEYWORD_SCORE_FLOOR,
                    ))
    if reasons:
        return SimilarityOutcome(reasons, True, BRAND_KEYWORD_SCORE_FLOOR)
    return SimilarityOutcome([], False, 0.0)
