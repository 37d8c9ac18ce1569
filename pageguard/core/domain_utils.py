import re
from typing import Iterable, Optional, Tuple
from urllib.parse import SplitResult, urljoin, urlsplit

# Scheme prefix accepted by hostname_of without rewriting
_HTTP_SCHEME_RE = re.compile(r'^https?://', re.IGNORECASE)

# Any URL scheme (used by host_only)
_ANY_SCHEME_RE = re.compile(r'^[a-z][a-z0-9+.\-]*:', re.IGNORECASE)

_BARE_HOST_RE = re.compile(r'^[a-z0-9.\-]+$', re.IGNORECASE)

# Dotted-quad shape only. Octets are not range checked and IPv6 is not handled.
_IP_HOST_RE = re.compile(r'^\d{1,3}(\.\d{1,3}){3}$')

_FORBIDDEN_HOST_CHARS_RE = re.compile(r'[\s<>^|%"\\{}`]')

_SPECIAL_SCHEMES = {'http', 'https', 'ftp', 'ws', 'wss'}


def split_url(value: str, base: Optional[str] = None) -> Tuple[str, SplitResult]:
    """
    Resolve ``value`` (optionally against ``base``) and return its lowercase
    hostname together with the split URL.

    Raises ValueError for URLs a browser would refuse to parse: a special
    scheme with no host, forbidden host characters, or a host that cannot be
    IDNA encoded. Non-ASCII hosts are returned in punycode form.
    """
    target = urljoin(base, value) if base else value
    parts = urlsplit(target)
    host = (parts.hostname or '').lower()

    if parts.scheme.lower() in _SPECIAL_SCHEMES and not host:
        raise ValueError(f"URL has no host: {value!r}")
    if host and _FORBIDDEN_HOST_CHARS_RE.search(host):
        raise ValueError(f"Invalid host in URL: {value!r}")
    if host and not host.isascii():
        host = host.encode('idna').decode('ascii')
    return host, parts


def parse_hostname(value: str) -> str:
    """Strict variant of hostname_of: raises ValueError instead of falling back."""
    if not value:
        return ''
    candidate = str(value)
    if not _HTTP_SCHEME_RE.match(candidate):
        if _BARE_HOST_RE.match(candidate):
            return candidate.lower()
        candidate = 'https://' + candidate
    host, _ = split_url(candidate)
    return host


def hostname_of(value) -> str:
    """Best-effort hostname of a URL or bare host. Never raises."""
    if not value:
        return ''
    text = str(value)
    try:
        return parse_hostname(text)
    except ValueError:
        return text.lower().split('/', 1)[0]


def get_labels(hostname: str):
    return [label for label in (hostname or '').split('.') if label]


def registered_domain(hostname: str) -> str:
    """
    Last two labels of ``hostname``.

    This is not public-suffix aware: ``example.co.uk`` yields ``co.uk``.
    Trust comparisons and stored configuration depend on that behaviour.
    """
    labels = get_labels(hostname)
    if len(labels) >= 2:
        return '.'.join(labels[-2:])
    return hostname or ''


def second_level_label(hostname: str) -> str:
    labels = get_labels(hostname)
    if not labels:
        return ''
    if len(labels) >= 2:
        return labels[-2].lower()
    return labels[0].lower()


def is_ip_address(hostname: str) -> bool:
    return bool(hostname) and bool(_IP_HOST_RE.match(hostname))


def is_punycode(hostname: str) -> bool:
    return isinstance(hostname, str) and 'xn--' in hostname


def tld_of(hostname: str) -> str:
    if not hostname or '.' not in hostname:
        return ''
    return hostname.rsplit('.', 1)[-1].lower()


def strip_www(hostname: str) -> str:
    if hostname.startswith('www.'):
        return hostname[4:]
    return hostname


def host_only(value) -> str:
    """Reduce user input (a URL or a hostname with a path) to a lowercase hostname."""
    if not value:
        return ''
    text = str(value).strip()
    if _ANY_SCHEME_RE.match(text):
        try:
            host, _ = split_url(text)
            return host
        except ValueError:
            pass
    return text.split('/', 1)[0].lower()


def normalize_trusted_domains(values: Iterable) -> Tuple[str, ...]:
    """Normalize configured entries to registered domains, keeping first-seen order."""
    seen = []
    for value in values or ():
        if value is None:
            continue
        domain = registered_domain(str(value).lower())
        if domain and domain not in seen:
            seen.append(domain)
    return tuple(seen)
