"""Shared fixtures for CiteMe tests."""

import json

import pytest

from citeme.config import Config


class FakeProvider:
    """Stands in for GeminiProvider: replays canned replies and records calls."""

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls = []

    def generate(self, prompt, model=None, temperature=1.0, max_tokens=None, json_mode=False):
        return self.generate_with_files(prompt, [], model, temperature, max_tokens, json_mode)

    def generate_with_files(self, prompt, file_paths, model=None, temperature=1.0,
                            max_tokens=None, json_mode=False):
        self.calls.append({
            "prompt": prompt,
            "file_paths": list(file_paths),
            "json_mode": json_mode,
        })
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def config(tmp_path):
    return Config(
        gemini_api_key=None,
        enable_rate_limiting=False,
        output_dir=str(tmp_path / "output"),
    )


@pytest.fixture
def fake_provider():
    def make(*replies):
        return FakeProvider(replies)
    return make


@pytest.fixture
def reference_pdfs(tmp_path):
    """Two placeholder reference PDFs on disk."""
    paths = []
    for name in ("smith2020.pdf", "jones2019.pdf"):
        path = tmp_path / name
        path.write_bytes(b"%PDF-1.4\n% placeholder\n")
        paths.append(str(path))
    return paths


@pytest.fixture
def ieee_response():
    return {
        "results": [
            {
                "fileName": "paper.pdf",
                "citation": "Prior work agrees [1], [2].",
                "footnotes": ["[2] Second ref.", "[1] First ref."],
            }
        ],
        "errors": [{"fileName": "broken.pdf", "error": "Failed to read PDF"}],
    }


@pytest.fixture
def ieee_response_file(tmp_path, ieee_response):
    path = tmp_path / "response.json"
    path.write_text(json.dumps(ieee_response), encoding="utf-8")
    return path
