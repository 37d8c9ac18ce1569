from enum import Enum

from pydantic import BaseModel, ConfigDict


class ReasonKind(str, Enum):
    # Domain similarity
    TRUSTED_DOMAIN = "trusted_domain"
    TYPOSQUAT = "typosquat"
    BRAND_KEYWORD = "brand_keyword"
    NO_SIMILARITY = "no_similarity"
    TYPOSQUAT_ERROR = "typosquat_error"

    # Transport / hostname
    INSECURE_TRANSPORT = "insecure_transport"
    PUNYCODE_HOSTNAME = "punycode_hostname"
    IP_HOSTNAME = "ip_hostname"

    # Forms
    CREDENTIAL_EXFILTRATION = "credential_exfiltration"
    DATA_HARVESTING = "data_harvesting"
    MALFORMED_FORM = "malformed_form"

    # Links
    LINK_EMPTY_HOST = "link_empty_host"
    LINK_IP_ADDRESS = "link_ip_address"
    LINK_PUNYCODE = "link_punycode"
    LINK_RISKY_TLD = "link_risky_tld"
    LINK_SUSPICIOUS_PATH = "link_suspicious_path"
    LINK_BRAND_TOKEN = "link_brand_token"
    LINK_MALFORMED = "link_malformed"

    # Page text
    RED_FLAG_TEXT = "red_flag_text"

    # Canonical / Open Graph
    CANONICAL_MISMATCH = "canonical_mismatch"
    CANONICAL_MATCH = "canonical_match"

    # Structural hints that trusted pages are allowed to shed
    HYPHEN = "hyphen"
    SUBDOMAIN = "subdomain"
    DEPTH = "depth"
    CAPITALIZED_TOKENS = "capitalized_tokens"

    @property
    def is_weak(self) -> bool:
        return self in WEAK_REASON_KINDS


# Removed from an exactly-trusted page's reasons when nothing raised suspicion
WEAK_REASON_KINDS = frozenset({
    ReasonKind.HYPHEN,
    ReasonKind.SUBDOMAIN,
    ReasonKind.DEPTH,
    ReasonKind.NO_SIMILARITY,
    ReasonKind.CAPITALIZED_TOKENS,
})


class Reason(BaseModel):
    """
    A single contributing reason.

    ``weight`` is the risk value the check produced: the additive score
    delta for additive checks, the score floor for floor checks, the
    per-link risk for link checks and 0 for neutral notes.
    """
    model_config = ConfigDict(frozen=True)

    kind: ReasonKind
    text: str
    weight: float = 0.0

    def __str__(self) -> str:
        return self.text
