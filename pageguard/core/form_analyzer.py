import logging
from typing import List, NamedTuple, Optional, Sequence

from pageguard.core.domain_utils import parse_hostname, registered_domain
from pageguard.core.reasons import Reason, ReasonKind
from pageguard.schemas import FormDescriptor

logger = logging.getLogger(__name__)


class FormAssessment(NamedTuple):
    # Each finding's weight is added to the running score in order
    findings: List[Reason]
    suspicious: bool


class FormAnalyzer:
    """Credential exfiltration and data-harvesting checks over captured forms"""

    def __init__(self):
        self.exfiltration_weight = 0.40
        self.harvesting_weight = 0.06
        self.harvesting_weight_trusted = 0.02
        self.malformed_weight = 0.04

    def analyze(self, forms: Sequence[Optional[FormDescriptor]], page_hostname: str,
                trusted_exact: bool) -> FormAssessment:
        findings = []
        suspicious = False
        page_domain = registered_domain(page_hostname)

        for form in forms:
            try:
                if form is None:
                    raise ValueError("form is missing")
                if form.has_password and form.action:
                    action_host = parse_hostname(form.action)
                    if (action_host and action_host != page_hostname
                            and page_domain not in action_host):
                        findings.append(Reason(
                            kind=ReasonKind.CREDENTIAL_EXFILTRATION,
                            text=f'Login form posts to external host ({action_host})',
                            weight=self.exfiltration_weight,
                        ))
                        suspicious = True
                elif form.input_count > 0 and not form.has_password and form.action:
                    findings.append(Reason(
                        kind=ReasonKind.DATA_HARVESTING,
                        text='Form with inputs but no password field (possible data harvesting)',
                        weight=self.harvesting_weight_trusted if trusted_exact else self.harvesting_weight,
                    ))
            except ValueError as e:
                logger.debug(f"Unusable form {form!r}: {e}")
                findings.append(Reason(
                    kind=ReasonKind.MALFORMED_FORM,
                    text='Malformed form action detected',
                    weight=self.malformed_weight,
                ))

        return FormAssessment(findings, suspicious)
