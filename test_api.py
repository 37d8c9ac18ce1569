from pageguard.config import settings

API = settings.API_PREFIX


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["message"] == f"{settings.APP_NAME} API"
    assert response.json()["api"] == API


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "trustedDomains": len(settings.DEFAULT_TRUSTED_DOMAINS),
    }


def test_analyze_stores_last_result(client):
    response = client.post(f"{API}/analyze", json={"url": "https://faceboook.com/login"})
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert body["result"]["suspicious"] is True
    assert body["result"]["score"] == 0.75
    assert body["result"]["details"]["pageHostname"] == "faceboook.com"

    stored = client.get(f"{API}/results/faceboook.com")
    assert stored.status_code == 200
    data = stored.json()
    assert data["hostname"] == "faceboook.com"
    assert data["result"]["score"] == 0.75
    assert data["assessedAt"]


def test_analyze_accepts_malformed_payload(client):
    response = client.post(f"{API}/analyze", json={"url": 5, "links": "nope"})
    assert response.status_code == 200
    assert response.json()["result"]["suspicious"] is False


def test_unknown_result_is_404(client):
    assert client.get(f"{API}/results/never-seen.example").status_code == 404


def test_analyze_link(client):
    response = client.post(f"{API}/analyze-link",
                           json={"link": "http://10.0.0.1/x", "pageHostname": "example.org"})
    assert response.status_code == 200
    body = response.json()
    assert body["risk"] == 0.2
    assert body["reason"]["kind"] == "link_ip_address"


def test_analyze_link_without_risk(client):
    response = client.post(f"{API}/analyze-link",
                           json={"link": "https://example.org/about", "pageHostname": "example.org"})
    assert response.json() == {"risk": 0.0, "reason": None}


def test_trusted_domain_crud(client):
    listed = client.get(f"{API}/trusted-domains").json()
    assert listed["domains"] == settings.DEFAULT_TRUSTED_DOMAINS

    added = client.post(f"{API}/trusted-domains", json={"domain": "https://www.mybank.com/login"})
    assert added.status_code == 200
    assert "www.mybank.com" in added.json()["domains"]
    assert "mybank.com" in added.json()["registeredDomains"]

    assert client.post(f"{API}/trusted-domains", json={"domain": "  "}).status_code == 400

    removed = client.delete(f"{API}/trusted-domains/facebook.com")
    assert removed.status_code == 200
    assert "facebook.com" not in removed.json()["domains"]
    assert client.delete(f"{API}/trusted-domains/facebook.com").status_code == 404

    cleared = client.delete(f"{API}/trusted-domains")
    assert cleared.json()["domains"] == []

    restored = client.post(f"{API}/trusted-domains/restore")
    assert restored.json()["domains"] == settings.DEFAULT_TRUSTED_DOMAINS


def test_added_domain_is_trusted_by_analysis(client):
    before = client.post(f"{API}/analyze", json={"url": "https://mybank.com/"}).json()["result"]
    assert before["score"] == 0.25

    client.post(f"{API}/trusted-domains", json={"domain": "mybank.com"})
    after = client.post(f"{API}/analyze", json={"url": "https://mybank.com/"}).json()["result"]
    assert after["suspicious"] is False
    assert after["score"] == 0.02
    assert after["reasons"] == ["Exact registered domain is trusted"]


def test_settings_export_import(client):
    document = {
        "trustedDomains": ["a.com", "b.org"],
        "enabledSites": {"https://a.com": True},
        "showInlineBadge": True,
    }
    imported = client.post(f"{API}/settings/import", json=document)
    assert imported.status_code == 200
    assert imported.json() == document
    assert client.get(f"{API}/settings/export").json() == document


def test_settings_import_rejects_non_object(client):
    assert client.post(f"{API}/settings/import", json=["a.com"]).status_code == 422


def test_alerts_are_rate_limited(client):
    alert = {
        "id": "tab-1",
        "origin": "evil.xyz",
        "msg": "",
        "result": {"suspicious": True, "score": 0.8},
    }
    first = client.post(f"{API}/alerts", json=alert).json()
    assert first["notified"] is True
    assert first["notification"] == {
        "title": "Possible phishing detected",
        "message": "Suspicion 80% for evil.xyz. Click to review.",
    }
    assert client.post(f"{API}/alerts", json=alert).json()["notified"] is True

    third = client.post(f"{API}/alerts", json=alert).json()
    assert third["notified"] is False
    assert third["notification"] is None


def test_alert_default_message(client):
    body = client.post(f"{API}/alerts", json={"id": "tab-2"}).json()
    assert body["notification"]["message"] == "Possible phishing detected"


def test_analyze_with_non_finite_numbers(client):
    response = client.post(
        f"{API}/analyze",
        content='{"url": "https://faceboook.com/", "timestamp": Infinity,'
                ' "forms": [{"action": "https://x.org/s", "inputCount": NaN}]}',
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 200
    result = response.json()["result"]
    assert result["suspicious"] is True
    assert result["details"]["pageHostname"] == "faceboook.com"
