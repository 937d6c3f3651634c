"""
End-to-end tests for the HTTP API.

Request and response bodies use camelCase keys.
"""

import logging

from fastapi.testclient import TestClient
from app.main import app

client = TestClient(app)

GOOGLE_POSTING = "Google LLC\nSoftware Engineering Intern\nMountain View, CA"


class TestHealth:

    def test_root(self):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json() == {"service": "posting-extractor", "status": "running"}

    def test_health(self):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestLoggingSetup:

    def test_configured_on_startup_not_import(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        TestClient(app).get("/health")
        assert calls == []
        with TestClient(app) as started:
            started.get("/health")
        assert len(calls) == 1
        assert "level" in calls[0]


class TestExtractText:

    def test_posting_header(self):
        response = client.post("/extract/text", json={"text": GOOGLE_POSTING})
        assert response.status_code == 200
        data = response.json()
        record = data["record"]
        assert record["company"] == "Google LLC"
        assert "Intern" in record["jobTitle"]
        assert record["location"] == "Mountain View, CA"
        assert record["extractionMetadata"]["sourceType"] == "screenshot"
        assert data["confidence"] == 50
        assert data["confidenceLevel"] == "Low"

    def test_empty_text_gives_sentinel_record(self):
        response = client.post("/extract/text", json={"text": ""})
        assert response.status_code == 200
        record = response.json()["record"]
        assert record["company"] == "Company not specified"
        assert record["jobTitle"] == "Position not specified"
        assert record["skills"] == []
        assert response.json()["confidence"] == 0

    def test_email_source_and_hint(self):
        response = client.post(
            "/extract/text",
            json={"text": "Thanks for applying to the Data Analyst role", "source": "email", "companyHint": "Acme"},
        )
        assert response.status_code == 200
        record = response.json()["record"]
        assert record["company"] == "Acme"
        assert record["salary"] == "Not specified"
        assert record["extractionMetadata"]["sourceType"] == "email"


class TestExtractScreenshot:

    def test_no_passes(self):
        response = client.post("/extract/screenshot", json={"passes": []})
        assert response.status_code == 400

    def test_all_passes_failed(self):
        response = client.post("/extract/screenshot", json={"passes": [{"text": "x", "confidence": 0}]})
        assert response.status_code == 422

    def test_merge_and_extract(self):
        passes = [
            {"text": GOOGLE_POSTING, "confidence": 88, "description": "grayscale_2x"},
            {"text": GOOGLE_POSTING, "confidence": 71},
        ]
        response = client.post("/extract/screenshot", json={"passes": passes})
        assert response.status_code == 200
        data = response.json()
        assert data["merge"]["method"] == "intelligent_merge"
        assert data["merge"]["sourceResults"] == 2
        assert data["quality"]["bestMethod"] == "grayscale_2x"
        assert data["record"]["company"] == "Google LLC"
        assert data["record"]["extractionMetadata"]["originConfidence"] == data["merge"]["confidence"]


class TestEmailScan:

    def test_no_messages(self):
        response = client.post("/emails/scan", json={"messages": []})
        assert response.status_code == 400

    def test_scan(self):
        messages = [
            {
                "id": "m1",
                "subject": "Thank you for applying to Software Engineer Intern",
                "from": "Acme Careers <no-reply@acme.com>",
                "date": "2025-03-01T10:00:00Z",
                "bodyText": "Thank you for applying to the Software Engineer Intern position at Acme.",
            },
            {
                "id": "m2",
                "subject": "Lunch on Friday?",
                "from": "Pat <pat@gmail.com>",
                "bodyText": "Want to grab lunch?",
            },
        ]
        response = client.post("/emails/scan", json={"messages": messages, "existing": []})
        assert response.status_code == 200
        data = response.json()
        assert data["stats"]["totalMessages"] == 2
        assert data["stats"]["totalEmailsFound"] == 1
        item = data["results"][0]
        assert item["messageId"] == "m1"
        assert item["analysis"]["record"]["status"] == "applied"
        assert item["decision"]["isNew"] is True


class TestMatch:

    CANDIDATE = {
        "company": "Stripe",
        "jobTitle": "Software Engineer",
        "extractionMetadata": {
            "sourceType": "screenshot",
            "extractionDate": "2025-03-01T12:00:00Z",
            "confidence": "Medium",
        },
    }

    def test_new(self):
        response = client.post("/match", json={"candidate": self.CANDIDATE, "existing": []})
        assert response.status_code == 200
        data = response.json()
        assert data["isNew"] is True
        assert data["entry"]["companyName"] == "Stripe"

    def test_existing(self):
        existing = [{"id": "app-1", "companyName": "Stripe", "jobTitle": "Software Engineer Intern"}]
        response = client.post("/match", json={"candidate": self.CANDIDATE, "existing": existing})
        data = response.json()
        assert data["isNew"] is False
        assert data["existingId"] == "app-1"
