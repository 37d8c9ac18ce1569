from typing import List, NamedTuple

from pageguard.core.reasons import Reason, ReasonKind

MAX_TEXT_CHARS = 4000


class TextAssessment(NamedTuple):
    findings: List[Reason]
    suspicious: bool


class TextAnalyzer:
    def __init__(self):
        self.red_flags = [
            'your account will be locked',
            'verify your account',
            'click here to verify',
            'confirm your identity',
            'payment required',
            'suspend',
            'urgent action required',
        ]
        self.flag_weight = 0.08
        # Red flags on a trusted domain are weighted higher, not lower
        self.flag_weight_trusted = 0.20

    def analyze(self, text_sample: str, trusted_exact: bool) -> TextAssessment:
        """Match red-flag phrases in the first MAX_TEXT_CHARS characters of page text"""
        findings = []
        if not text_sample:
            return TextAssessment(findings, False)

        lower = text_sample[:MAX_TEXT_CHARS].lower()
        weight = self.flag_weight_trusted if trusted_exact else self.flag_weight
        for phrase in self.red_flags:
            if phrase in lower:
                findings.append(Reason(
                    kind=ReasonKind.RED_FLAG_TEXT,
                    text=f'Suspicious page text matched: "{phrase}"',
                    weight=weight,
                ))
        return TextAssessment(findings, bool(findings))
