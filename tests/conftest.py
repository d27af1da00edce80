import textwrap
from pathlib import Path

import pytest


LOGIN_FEATURE = """\
Feature: Login
  Scenario: Successful login
    Given I am a visitor
    When I submit valid credentials
    Then I should see my dashboard
"""


@pytest.fixture
def write_feature(tmp_path):
    """Write a feature file under tmp_path/features and return its path."""

    def _write(name: str, content: str, dedent: bool = True) -> Path:
        path = tmp_path / "features" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        text = textwrap.dedent(content) if dedent else content
        path.write_bytes(text.encode("utf-8"))
        return path

    return _write


@pytest.fixture
def login_feature(write_feature):
    return write_feature("login.feature", LOGIN_FEATURE)
