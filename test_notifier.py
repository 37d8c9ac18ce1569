from pageguard.services.notifier import AlertRateLimiter, NotificationService, build_notification


def test_rate_limiter_allows_two_per_key():
    limiter = AlertRateLimiter(max_per_key=2)
    assert limiter.try_acquire("https://evil.xyz")
    assert limiter.try_acquire("https://evil.xyz")
    assert not limiter.try_acquire("https://evil.xyz")
    assert limiter.get("https://evil.xyz") == 2
    assert limiter.try_acquire("https://other.xyz")


def test_rate_limiter_increment_and_reset():
    limiter = AlertRateLimiter()
    assert limiter.increment("a") == 1
    assert limiter.increment("a") == 2
    limiter.reset("a")
    assert limiter.get("a") == 0
    limiter.increment("b")
    limiter.reset()
    assert limiter.get("b") == 0


def test_build_notification_messages():
    suspicious = build_notification("evil.xyz", {"suspicious": True, "score": 0.125})
    assert suspicious.title == "Possible phishing detected"
    assert suspicious.message == "Suspicion 13% for evil.xyz. Click to review."

    clean = build_notification("example.org", {"suspicious": False, "score": 0.05})
    assert clean.title == "Site looks OK"
    assert clean.message == "Checked example.org: score 5%"

    custom = build_notification("evil.xyz", None, raw_msg="Suspicious link")
    assert custom.title == "Site looks OK"
    assert custom.message == "Suspicious link"


def test_notification_service_uses_origin_when_id_missing():
    service = NotificationService(AlertRateLimiter(max_per_key=1))
    result = {"suspicious": True, "score": 0.9}
    assert service.notify("", "evil.xyz", result) is not None
    assert service.notify("", "evil.xyz", result) is None
    assert service.limiter.get("evil.xyz") == 1
