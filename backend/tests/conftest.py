"""Shared test configuration, pytest markers and domain fixtures."""

from datetime import date

import pytest

from api.router import limiter
from config import settings
from models.schemas.candidate import CandidateProfile
from models.schemas.organization import OrganizationProfile
from models.schemas.posting import Posting


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "remote: exercises the remote tier through an injected fake model"
    )


@pytest.fixture(autouse=True)
def offline(monkeypatch):
    """Never reach the real Gemini API, and don't rate-limit the test client."""
    monkeypatch.setattr(settings, "gemini_api_key", "")
    monkeypatch.setattr(limiter, "enabled", False)


@pytest.fixture
def as_of() -> date:
    return date(2025, 6, 15)


@pytest.fixture
def candidate() -> CandidateProfile:
    return CandidateProfile(
        id="cand-1",
        first_name="Aroha",
        last_name="Ngata",
        email="aroha@example.com",
        institution="University of Auckland",
        degree="Bachelor of Science",
        graduation_year=2025,
        skills=["Python", "SQL"],
        location="Auckland",
        availability="internship",
        status="approved",
    )


@pytest.fixture
def organization() -> OrganizationProfile:
    return OrganizationProfile(
        id="org-1",
        company_name="Kiwi Data Ltd",
        industry="Technology",
        location="Auckland",
        status="approved",
    )


@pytest.fixture
def posting() -> Posting:
    return Posting(
        id="post-1",
        organization_id="org-1",
        title="Data Engineering Intern",
        description="Help us build data pipelines.",
        skills_required=["Python", "Django"],
        location="Auckland",
        employment_type="internship",
        status="published",
    )


def _make_fake_model(reply):
    def generate(prompt):
        generate.prompts.append(prompt)
        if isinstance(reply, Exception):
            raise reply
        return reply
    generate.prompts = []
    return generate


@pytest.fixture
def fake_model():
    """Factory for stand-in Gemini calls: returns ``reply`` and records prompts."""
    return _make_fake_model
