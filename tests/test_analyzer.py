import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from feature_fingerprint.analyzer import (
    parse_feature,
    process_feature,
    process_features,
    relative_path,
    strip_line_suffix,
)
from feature_fingerprint.errors import FeatureEncodingError, MissingFeatureHeader
from feature_fingerprint.fingerprint import compose_fingerprint, digest

from conftest import LOGIN_FEATURE


CHECKOUT_FEATURE = """\
Feature: Checkout
  Background:
    Given I am signed in
    And my cart has an item

  Scenario: Pay by card
    Given I am on the checkout page
    When I pay by card
    Then I see a receipt
"""


def test_single_scenario_feature(login_feature, tmp_path):
    feature = process_feature(login_feature, project_root=tmp_path)

    assert feature.description == "Login"
    assert feature.path == "features/login.feature"
    assert feature.background is None
    assert len(feature.scenarios) == 1

    scenario = feature.scenarios[0]
    assert scenario.description == "Successful login"
    assert [s.raw_content for s in scenario.steps] == [
        "Given I am a visitor",
        "When I submit valid credentials",
        "Then I should see my dashboard",
    ]
    expected = digest(":".join(digest(s.raw_content) for s in scenario.steps))
    assert scenario.fingerprint == expected
    assert feature.fingerprint == digest(scenario.fingerprint)


def test_renaming_a_scenario_keeps_fingerprints(write_feature, tmp_path):
    original = process_feature(write_feature("a.feature", LOGIN_FEATURE), project_root=tmp_path)
    renamed = process_feature(
        write_feature("b.feature", LOGIN_FEATURE.replace("Successful login", "Successful sign-in")),
        project_root=tmp_path,
    )

    assert renamed.scenarios[0].description == "Successful sign-in"
    assert renamed.scenarios[0].fingerprint == original.scenarios[0].fingerprint
    assert renamed.fingerprint == original.fingerprint


def test_missing_feature_header(write_feature):
    path = write_feature("broken.feature", "Scenario: x\n  Given y\n")
    with pytest.raises(MissingFeatureHeader) as exc:
        process_feature(path)
    assert exc.value.path == str(path)
    assert "broken.feature" in str(exc.value)


def test_background_is_appended_after_scenarios(write_feature, tmp_path):
    feature = process_feature(write_feature("checkout.feature", CHECKOUT_FEATURE), project_root=tmp_path)

    assert len(feature.background.steps) == 2
    assert len(feature.scenarios) == 1
    assert len(feature.scenarios[0].steps) == 3
    assert feature.background.raw_content.startswith("Background:")
    assert feature.fingerprint == digest(f"{feature.scenarios[0].fingerprint}:{feature.background.fingerprint}")


def test_changing_a_step_changes_every_level(login_feature, write_feature, tmp_path):
    before = process_feature(login_feature, project_root=tmp_path)
    after = process_feature(
        write_feature("changed.feature", LOGIN_FEATURE.replace("valid credentials", "invalid credentials")),
        project_root=tmp_path,
    )

    assert before.scenarios[0].steps[0].fingerprint == after.scenarios[0].steps[0].fingerprint
    assert before.scenarios[0].steps[1].fingerprint != after.scenarios[0].steps[1].fingerprint
    assert before.scenarios[0].fingerprint != after.scenarios[0].fingerprint
    assert before.fingerprint != after.fingerprint


def test_changing_a_keyword_changes_the_fingerprint():
    before = parse_feature(LOGIN_FEATURE, "x.feature")
    after = parse_feature(LOGIN_FEATURE.replace("When I submit", "And I submit"), "x.feature")
    assert before.scenarios[0].steps[1].fingerprint != after.scenarios[0].steps[1].fingerprint
    assert before.fingerprint != after.fingerprint


def test_reordering_steps_changes_scenario_fingerprint():
    swapped = LOGIN_FEATURE.replace(
        "    Given I am a visitor\n    When I submit valid credentials\n",
        "    When I submit valid credentials\n    Given I am a visitor\n",
    )
    before = parse_feature(LOGIN_FEATURE, "x.feature")
    after = parse_feature(swapped, "x.feature")
    assert before.scenarios[0].fingerprint != after.scenarios[0].fingerprint


def test_indentation_and_trailing_whitespace_are_ignored():
    reformatted = (
        "Feature:   Login   \n"
        "Scenario: Successful login\n"
        "        Given I am a visitor   \n"
        "  When I submit valid credentials\t\n"
        "      Then I should see my dashboard"
    )
    assert parse_feature(reformatted, "x.feature").fingerprint == parse_feature(LOGIN_FEATURE, "x.feature").fingerprint


def test_feature_without_scenarios_or_background():
    feature = parse_feature("Feature: Empty\n  Just some prose.\n", "empty.feature")
    assert feature.scenarios == ()
    assert feature.background is None
    assert feature.fingerprint == digest("")


def test_scenario_without_steps_is_valid():
    feature = parse_feature("Feature: F\n  Scenario: Nothing here\n\n", "f.feature")
    assert len(feature.scenarios) == 1
    assert feature.scenarios[0].steps == ()
    assert feature.scenarios[0].fingerprint == digest("")
    assert feature.fingerprint == compose_fingerprint([digest("")])


def test_scenarios_keep_file_order():
    text = (
        "Feature: Many\n"
        "  Scenario: First\n    Given one\n"
        "  Scenario: Second\n    Given two\n\n"
        "  Scenario: Third\n    Given three\n"
    )
    feature = parse_feature(text, "many.feature")
    assert [s.description for s in feature.scenarios] == ["First", "Second", "Third"]
    assert feature.fingerprint == compose_fingerprint(s.fingerprint for s in feature.scenarios)


def test_only_first_background_is_used(caplog):
    text = (
        "Feature: Twice\n"
        "  Background:\n    Given first\n\n"
        "  Background:\n    Given second\n"
    )
    with caplog.at_level(logging.WARNING, logger="feature_fingerprint.parsing.builder"):
        feature = parse_feature(text, "twice.feature")
    assert [s.description for s in feature.background.steps] == ["first"]
    assert "more than one Background" in caplog.text


def test_records_are_immutable(login_feature):
    feature = process_feature(login_feature)
    with pytest.raises(ValidationError):
        feature.description = "changed"
    with pytest.raises(ValidationError):
        feature.scenarios[0].steps[0].description = "changed"


def test_parsing_is_deterministic(login_feature):
    assert process_feature(login_feature) == process_feature(login_feature)


def test_line_suffix_is_stripped(login_feature, tmp_path):
    feature = process_feature(f"{login_feature}:3", project_root=tmp_path)
    assert feature.path == "features/login.feature"
    assert strip_line_suffix("features/a.feature:12") == "features/a.feature"
    assert strip_line_suffix("features/a.feature") == "features/a.feature"


def test_path_outside_root_is_kept(login_feature, tmp_path):
    other_root = tmp_path / "elsewhere"
    other_root.mkdir()
    assert relative_path(str(login_feature), other_root) == login_feature.as_posix()


def test_result_accumulator_receives_feature(login_feature):
    result = []
    feature = process_feature(login_feature, result=result)
    assert result == [feature]


def test_process_features_keeps_input_order(write_feature, tmp_path):
    b = write_feature("b.feature", "Feature: B\n")
    a = write_feature("a.feature", "Feature: A\n")
    features = process_features([b, a], project_root=tmp_path)
    assert [f.description for f in features] == ["B", "A"]


def test_process_features_fails_fast(write_feature, tmp_path):
    good = write_feature("good.feature", "Feature: Good\n")
    bad = write_feature("bad.feature", "no header here\n")
    never = write_feature("never.feature", "Feature: Never\n")

    result = []
    with pytest.raises(MissingFeatureHeader) as exc:
        process_features([good, bad, never], project_root=tmp_path, result=result)
    assert exc.value.path == str(bad)
    assert [f.description for f in result] == ["Good"]


def test_process_features_propagates_io_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        process_features([tmp_path / "missing.feature"], project_root=tmp_path)


def test_process_features_discovers_from_config(write_feature, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("FEATURE_FINGERPRINT_PROJECT_ROOT", str(tmp_path))
    write_feature("z/last.feature", "Feature: Last\n")
    write_feature("first.feature", "Feature: First\n")
    write_feature("notes.txt", "Feature: Not a feature file\n")

    features = process_features()
    assert [f.path for f in features] == ["features/first.feature", "features/z/last.feature"]


def test_symlinked_feature_keeps_its_in_tree_path(tmp_path):
    shared = tmp_path / "shared"
    shared.mkdir()
    (shared / "login.feature").write_text(LOGIN_FEATURE, encoding="utf-8")
    features = tmp_path / "features"
    features.mkdir()
    link = features / "login.feature"
    try:
        link.symlink_to(Path("..") / "shared" / "login.feature")
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not supported here")

    feature = process_feature(link, project_root=tmp_path)
    assert feature.path == "features/login.feature"


def test_non_utf8_file_names_the_file(tmp_path):
    path = tmp_path / "features" / "cafe.feature"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes("Feature: café\n".encode("latin-1"))

    with pytest.raises(FeatureEncodingError) as exc:
        process_features([path], project_root=tmp_path)
    assert exc.value.path == str(path)
    assert "cafe.feature" in str(exc.value)
    assert isinstance(exc.value.__cause__, UnicodeDecodeError)
