import pytest

from pageguard.core.link_analyzer import MAX_LINKS_ANALYZED, LinkAnalyzer
from pageguard.core.reasons import ReasonKind
from pageguard.core.risk_scorer import assess_link

PAGE = "example.com"


@pytest.mark.parametrize("link, risk, kind", [
    ("javascript:void(0)", 0.02, ReasonKind.LINK_EMPTY_HOST),
    ("https://192.168.1.5/login", 0.20, ReasonKind.LINK_IP_ADDRESS),
    ("https://xn--pple-43d.com/", 0.18, ReasonKind.LINK_PUNYCODE),
    ("http://free-prizes.xyz/login", 0.12, ReasonKind.LINK_RISKY_TLD),
    ("https://shop.example.com/account/verify", 0.10, ReasonKind.LINK_SUSPICIOUS_PATH),
    ("https://paypal-help.com/home", 0.14, ReasonKind.LINK_BRAND_TOKEN),
    ("http://", 0.05, ReasonKind.LINK_MALFORMED),
])
def test_rules(link, risk, kind):
    value, reason = assess_link(link, PAGE)
    assert value == risk
    assert reason.kind == kind
    assert reason.weight == risk


@pytest.mark.parametrize("link", [
    "https://example.com/about",
    "/relative/path",
    "#top",
])
def test_clean_links(link):
    assert assess_link(link, PAGE) == (0.0, None)


def test_first_path_token_wins():
    _, reason = assess_link("https://shop.example.com/account/verify", PAGE)
    assert reason.text == 'Link path contains suspicious token "verify" (/account/verify)'


def test_brand_token_ignored_on_same_host():
    assert assess_link("https://secure-bank.com/", "secure-bank.com") == (0.0, None)


def test_risky_tld_reason_text():
    _, reason = assess_link("http://free-prizes.xyz/", PAGE)
    assert reason.text == "Link uses uncommon TLD .xyz (free-prizes.xyz)"


def test_non_string_link_is_malformed():
    risk, reason = assess_link(42, PAGE)
    assert risk == 0.05
    assert reason.kind == ReasonKind.LINK_MALFORMED


def test_missing_page_hostname_uses_placeholder_base():
    assert assess_link("/about", "") == (0.0, None)


class TestAggregate:
    def setup_method(self):
        self.analyzer = LinkAnalyzer()

    def test_mean_is_taken_over_all_links(self):
        links = ["http://1.2.3.4/"] * MAX_LINKS_ANALYZED + ["https://example.com/"] * 10
        result = self.analyzer.aggregate(links, PAGE, trusted_exact=False)
        assert result.contribution == pytest.approx(0.20 * 40 / 50)
        assert len(result.reasons) == MAX_LINKS_ANALYZED

    def test_links_beyond_cap_are_ignored(self):
        links = ["https://example.com/"] * MAX_LINKS_ANALYZED + ["http://1.2.3.4/"] * 5
        result = self.analyzer.aggregate(links, PAGE, trusted_exact=False)
        assert result.contribution == 0.0
        assert result.reasons == []

    def test_trusted_ceiling(self):
        links = ["http://1.2.3.4/", "http://5.6.7.8/"]
        trusted = self.analyzer.aggregate(links, PAGE, trusted_exact=True)
        untrusted = self.analyzer.aggregate(links, PAGE, trusted_exact=False)
        assert trusted.contribution == 0.15
        assert untrusted.contribution == pytest.approx(0.20)
        assert not untrusted.forces_suspicion
