"""Pytest configuration and shared fixtures for prq tests."""

import json
from unittest.mock import Mock

import pytest

from prq.core.git import Remote
from prq.core.http import ApiResponse


@pytest.fixture
def mock_transport():
    """Transport mock answering 200 with an empty JSON object."""
    transport = Mock()
    transport.send.return_value = ApiResponse(status_code=200, body=json.dumps({}).encode("utf-8"))
    return transport


@pytest.fixture
def mock_vcs():
    """VersionControlQuery mock with one GitHub fetch remote and no stored config."""
    vcs = Mock()
    vcs.remotes.return_value = [
        Remote("origin", "git@github.com:alice/widgets.git", "(fetch)"),
        Remote("origin", "git@github.com:alice/widgets.git", "(push)"),
    ]
    vcs.config_get.return_value = None
    vcs.current_branch.return_value = "feature"
    vcs.branch_exists.return_value = False
    return vcs


@pytest.fixture
def sample_pull():
    """Sample pull request as returned by the forge."""
    return {
        "number": 7,
        "title": "Add sprockets",
        "state": "open",
        "body": "Sprockets are needed.",
        "user": {"login": "alice"},
        "created_at": "2024-01-15T10:00:00Z",
        "updated_at": "2024-01-16T11:00:00Z",
        "comments_url": "https://api.github.com/repos/acme/widgets/issues/7/comments",
        "html_url": "https://github.com/acme/widgets/pull/7",
        "head": {
            "ref": "sprockets",
            "repo": {
                "full_name": "alice/widgets",
                "clone_url": "https://github.com/alice/widgets.git",
                "owner": {"login": "alice"},
            },
        },
        "base": {"ref": "main"},
    }


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


def pytest_collection_modifyitems(config, items):
    """Add markers based on file location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
