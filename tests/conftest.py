"""Pytest configuration and shared fixtures."""

import json
import pytest
from pathlib import Path
from typing import List

from fastapi.testclient import TestClient

from standards_search.api.server import create_app
from standards_search.api.service import StandardsService
from standards_search.config import Settings
from standards_search.core.engine import RelevanceSearchEngine
from standards_search.data.loader import load_corpus
from standards_search.models.record import Record


class ScriptedAIClient:
    """Test double for the generative-AI client.

    ``responder`` maps a prompt to the answer text; returning an exception
    instance makes ``generate`` raise it.
    """

    enabled = True

    def __init__(self, responder):
        self.responder = responder
        self.prompts: List[str] = []
        self.closed = False

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        answer = self.responder(prompt)
        if isinstance(answer, Exception):
            raise answer
        return answer

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def scripted_ai():
    """Factory for scripted AI clients."""
    return ScriptedAIClient


@pytest.fixture
def sample_records() -> List[Record]:
    """Create a small set of sections across two standards."""
    return [
        Record(
            id=1,
            title="Risk Management",
            content="Risk management identifies threats and opportunities early.",
            standard_id=1,
            section_number="1.1",
        ),
        Record(
            id=2,
            title="Quality Assurance",
            content="Quality reviews reduce risk in delivery.",
            standard_id=1,
            section_number="1.2",
        ),
        Record(
            id=3,
            title="Stakeholder Engagement",
            content="Engagement keeps stakeholders informed.",
            standard_id=2,
            section_number="2",
        ),
        Record(
            id=4,
            title="Risk Theme",
            content="The theme covers uncertainty.",
            standard_id=2,
            section_number="5",
        ),
    ]


@pytest.fixture
def engine() -> RelevanceSearchEngine:
    """Create a relevance engine with default weights."""
    return RelevanceSearchEngine()


@pytest.fixture
def repository():
    """Repository loaded from the bundled seed corpus."""
    return load_corpus()


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment, with AI disabled."""
    return Settings(gemini_api_key=None, log_level="WARNING", _env_file=None)


@pytest.fixture
async def service(settings):
    """Create and initialize a service over the seed corpus."""
    async with StandardsService.create(settings=settings) as service:
        yield service


@pytest.fixture
def client(settings):
    """FastAPI test client running the full application lifespan."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def corpus_dir(tmp_path) -> Path:
    """Write a minimal two-standard corpus to a temporary directory."""
    manifest = {
        "standards": [
            {"title": "Alpha Method", "type": "ALPHA", "version": "1", "file": "alpha.json", "anchor_prefix": "alpha"},
            {"title": "Beta Guide", "type": "BETA", "version": "2", "file": "beta.json", "anchor_prefix": "beta"},
        ]
    }
    alpha = [
        {"section_number": "1.10", "title": "Closing", "chapter": "Lifecycle",
         "content": "Closing the project. Lessons learned are archived."},
        {"section_number": "1.9", "title": "Planning", "chapter": "Lifecycle",
         "content": "Planning sets the schedule baseline and the cost baseline."},
        {"section_number": 2, "title": "Governance", "chapter": "Control",
         "content": "Governance assigns decision rights."},
        {"section_number": "3", "title": "", "content": "Missing a title."},
        {"section_number": "1.9", "title": "Planning again", "chapter": "Lifecycle", "content": "Duplicate."},
    ]
    beta = [
        {"section_number": "4.1", "title": "Risk", "chapter": "Practices",
         "content": "Risk responses are planned and monitored.", "word_count": 6, "sentence_count": 1},
    ]
    (tmp_path / "manifest.json").write_text(json.dumps(manifest), encoding="utf-8")
    (tmp_path / "alpha.json").write_text(json.dumps(alpha), encoding="utf-8")
    (tmp_path / "beta.json").write_text(json.dumps(beta), encoding="utf-8")
    return tmp_path
