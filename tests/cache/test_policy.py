import pytest

from schoolms.cache.policy import DEFAULT_TTLS, TTLPolicy
from schoolms.common.exceptions import ConfigurationError


class TestTTLPolicy:
    def test_table_values(self):
        policy = TTLPolicy()

        assert policy.ttl_for("student", "detail") == 900
        assert policy.ttl_for("student", "notification_list") == 120
        assert policy.ttl_for("department", "detail") == 1800
        assert policy.ttl_for("user", "roles") == 1800

    def test_unknown_pair_uses_default(self):
        assert TTLPolicy(default_ttl=42).ttl_for("widget", "detail") == 42

    def test_override_wins(self):
        policy = TTLPolicy(overrides={"student.detail": 30, "widget.list": 5})

        assert policy.ttl_for("student", "detail") == 30
        assert policy.ttl_for("widget", "list") == 5
        assert DEFAULT_TTLS[("student", "detail")] == 900

    @pytest.mark.parametrize(
        "overrides", [{"student": 30}, {".detail": 30}, {"student.detail": 0}]
    )
    def test_invalid_override(self, overrides):
        with pytest.raises(ConfigurationError):
            TTLPolicy(overrides=overrides)

    def test_non_positive_default(self):
        with pytest.raises(ConfigurationError):
            TTLPolicy(default_ttl=0)

    def test_from_settings(self, settings):
        settings = settings.model_copy(
            update={"CACHE_DEFAULT_TTL": 99, "CACHE_TTL_OVERRIDES": {"grade.list": 7}}
        )

        policy = TTLPolicy.from_settings(settings)

        assert policy.default_ttl == 99
        assert policy.as_dict()["grade.list"] == 7
