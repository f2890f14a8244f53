"""Tests for dotted path resolution."""

import sys

sys.path.insert(0, "src")

from spritehooks.engine.paths import MISSING, resolve


class TestResolve:
    """Tests for resolve()."""

    def test_nested_lookup(self):
        root = {"payload": {"pull_request": {"user": {"login": "octocat"}}}}
        assert resolve(root, "payload.pull_request.user.login") == "octocat"

    def test_returns_containers(self):
        root = {"payload": {"labels": ["bug", "p1"]}}
        assert resolve(root, "payload.labels") == ["bug", "p1"]

    def test_missing_key(self):
        assert resolve({"payload": {}}, "payload.action") is MISSING

    def test_walking_into_scalar(self):
        assert resolve({"payload": {"action": "opened"}}, "payload.action.name") is MISSING

    def test_sequences_are_not_indexed(self):
        assert resolve({"payload": {"items": ["a", "b"]}}, "payload.items.0") is MISSING

    def test_none_root(self):
        assert resolve(None, "payload") is MISSING

    def test_non_string_path(self):
        assert resolve({"a": 1}, 42) is MISSING

    def test_present_none_is_not_missing(self):
        assert resolve({"payload": {"merged_at": None}}, "payload.merged_at") is None

    def test_missing_is_falsy_singleton(self):
        assert not MISSING
        assert repr(MISSING) == "MISSING"
        assert type(MISSING)() is MISSING
