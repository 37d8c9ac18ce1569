import logging
from typing import Any, Dict, List, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from pageguard.config import settings
from pageguard.core.domain_utils import host_only, normalize_trusted_domains
from pageguard.models import SiteSetting, TrustedDomain

logger = logging.getLogger(__name__)

_SEEDED_KEY = "trusted_domains_seeded"
_ENABLED_SITES_KEY = "enabled_sites"
_INLINE_BADGE_KEY = "show_inline_badge"


class TrustedDomainStore:
    """
    Persisted trusted-domain configuration and the options that travel with
    it in the settings export.

    Entries are stored the way the user typed them (reduced to a hostname);
    ``trusted_set`` normalizes them to registered domains for the scorer.
    """

    def __init__(self, db: Session):
        self.db = db

    # ---------- Trusted domains ----------

    def list_domains(self) -> List[str]:
        self._ensure_seeded()
        rows = self.db.query(TrustedDomain).order_by(TrustedDomain.position, TrustedDomain.id).all()
        return [row.domain for row in rows]

    def trusted_set(self) -> Tuple[str, ...]:
        """Registered-domain form of the configured entries, in configured order."""
        return normalize_trusted_domains(self.list_domains())

    def add(self, value: str) -> str:
        """Add a domain (URLs are reduced to their host). Returns the stored entry."""
        domain = host_only(value)
        if not domain:
            raise ValueError("Enter a valid hostname")

        self._ensure_seeded()
        exists = self.db.query(TrustedDomain).filter(TrustedDomain.domain == domain).first()
        if exists:
            return domain

        self.db.add(TrustedDomain(domain=domain, position=self._next_position()))
        self.db.commit()
        logger.info(f"✓ Trusted domain added: {domain}")
        return domain

    def remove(self, value: str) -> bool:
        domain = host_only(value)
        self._ensure_seeded()
        deleted = self.db.query(TrustedDomain).filter(TrustedDomain.domain == domain).delete()
        self.db.commit()
        if deleted:
            logger.info(f"Trusted domain removed: {domain}")
        return bool(deleted)

    def clear(self) -> None:
        self._ensure_seeded()
        self.db.query(TrustedDomain).delete()
        self.db.commit()
        logger.info("Trusted domains cleared")

    def restore_defaults(self) -> None:
        """Reset trusted domains and site options to their defaults"""
        self.db.query(TrustedDomain).delete()
        self._replace_domains(settings.DEFAULT_TRUSTED_DOMAINS)
        self._set(_ENABLED_SITES_KEY, {})
        self._set(_INLINE_BADGE_KEY, False)
        self._set(_SEEDED_KEY, True)
        self.db.commit()
        logger.info("Defaults restored")

    # ---------- Import / export ----------

    def export_settings(self) -> Dict[str, Any]:
        return {
            "trustedDomains": self.list_domains(),
            "enabledSites": self._get(_ENABLED_SITES_KEY, {}),
            "showInlineBadge": bool(self._get(_INLINE_BADGE_KEY, False)),
        }

    def import_settings(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply an exported settings document.

        ``trustedDomains`` is only replaced when it is a list, and
        ``enabledSites`` only when it is an object. ``showInlineBadge`` is
        always overwritten.
        """
        if not isinstance(document, dict):
            raise ValueError("Settings document must be a JSON object")

        self._ensure_seeded()
        trusted = document.get("trustedDomains")
        if isinstance(trusted, list):
            self.db.query(TrustedDomain).delete()
            self._replace_domains([host_only(v) for v in trusted if isinstance(v, str)])

        enabled = document.get("enabledSites")
        if isinstance(enabled, dict):
            self._set(_ENABLED_SITES_KEY, enabled)

        self._set(_INLINE_BADGE_KEY, bool(document.get("showInlineBadge")))
        self.db.commit()
        logger.info("Settings imported")
        return self.export_settings()

    # ---------- Helpers ----------

    def _ensure_seeded(self):
        """Seed the default trusted domains once; a cleared list stays cleared."""
        if self._get(_SEEDED_KEY, False):
            return
        if not self.db.query(TrustedDomain).count():
            self._replace_domains(settings.DEFAULT_TRUSTED_DOMAINS)
        self._set(_SEEDED_KEY, True)
        self.db.commit()

    def _replace_domains(self, domains):
        seen = set()
        position = 0
        for domain in domains:
            if not domain or domain in seen:
                continue
            seen.add(domain)
            self.db.add(TrustedDomain(domain=domain, position=position))
            position += 1
        self.db.flush()

    def _next_position(self) -> int:
        highest = self.db.query(func.max(TrustedDomain.position)).scalar()
        return 0 if highest is None else highest + 1

    def _get(self, key: str, default):
        row = self.db.get(SiteSetting, key)
        return default if row is None else row.value

    def _set(self, key: str, value):
        row = self.db.get(SiteSetting, key)
        if row is None:
            self.db.add(SiteSetting(key=key, value=value))
        else:
            row.value = value
        self.db.flush()
