"""
Test cases for integration value objects.
"""

import base64
from datetime import UTC, datetime, timedelta

import pytest

from integration_hub.core.errors import ValidationError
from integration_hub.modules.integration.domain.enums import (
    AuthType,
    FieldType,
    HttpMethod,
    IntegrationType,
)
from integration_hub.modules.integration.domain.value_objects import (
    ApiEndpoint,
    AuthCredentials,
    DataSchema,
    FieldDefinition,
    FieldPath,
    IntegrationConfig,
    RateLimits,
    RetryPolicy,
    SyncSchedule,
)


class TestApiEndpoint:
    """Test API endpoint validation."""

    def test_valid_endpoint(self):
        """Test a valid endpoint exposes host and timeout."""
        endpoint = ApiEndpoint("https://api.example.com:8443/v1", "post", timeout_ms=1500)

        assert endpoint.method == HttpMethod.POST
        assert endpoint.host == "api.example.com:8443"
        assert endpoint.timeout_seconds == 1.5

    @pytest.mark.parametrize(
        "url", ["", "ftp://example.com", "example.com/path", "https://"]
    )
    def test_invalid_urls(self, url):
        """Test URLs need an http(s) scheme and a host."""
        with pytest.raises(ValidationError):
            ApiEndpoint(url)

    @pytest.mark.parametrize("timeout_ms", [0, 300_001, 1.5])
    def test_invalid_timeouts(self, timeout_ms):
        """Test the timeout range."""
        with pytest.raises(ValidationError):
            ApiEndpoint("https://api.example.com", timeout_ms=timeout_ms)

    def test_unknown_method(self):
        """Test unsupported HTTP methods fail."""
        with pytest.raises(ValidationError):
            ApiEndpoint("https://api.example.com", "TRACE")

    def test_equality_by_value(self):
        """Test endpoints compare by their attributes."""
        first = ApiEndpoint("https://api.example.com", headers={"A": "1"})

        assert first == ApiEndpoint("https://api.example.com", headers={"A": "1"})
        assert first.with_header("B", "2") != first


class TestAuthCredentials:
    """Test credential factories, headers and expiry."""

    @pytest.fixture
    def now(self):
        return datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

    def test_api_key_header(self):
        """Test API keys go in X-API-Key."""
        auth = AuthCredentials.create_api_key("k1")

        assert auth.to_auth_header() == {"X-API-Key": "k1"}

    def test_bearer_and_oauth_headers(self):
        """Test bearer and OAuth2 tokens use the Authorization header."""
        assert AuthCredentials.create_bearer("t1").to_auth_header() == {
            "Authorization": "Bearer t1"
        }
        assert AuthCredentials.create_oauth2("a1").to_auth_header() == {
            "Authorization": "Bearer a1"
        }

    def test_basic_header(self):
        """Test basic credentials are base64 encoded."""
        header = AuthCredentials.create_basic("ada", "s3cret").to_auth_header()

        assert header == {
            "Authorization": "Basic " + base64.b64encode(b"ada:s3cret").decode()
        }

    def test_custom_headers(self):
        """Test custom credentials become headers verbatim."""
        auth = AuthCredentials.create_custom({"X-Tenant": "t1", "X-Token": "abc"})

        assert auth.auth_type == AuthType.CUSTOM
        assert auth.to_auth_header() == {"X-Tenant": "t1", "X-Token": "abc"}

    @pytest.mark.parametrize(
        "factory",
        [
            lambda: AuthCredentials.create_api_key(""),
            lambda: AuthCredentials.create_basic("ada", " "),
            lambda: AuthCredentials.create_custom({}),
        ],
    )
    def test_missing_secrets_are_rejected(self, factory):
        """Test each scheme requires its values."""
        with pytest.raises(ValidationError):
            factory()

    def test_expiry(self, now):
        """Test expiry is inclusive of the expiry instant."""
        auth = AuthCredentials.create_bearer("t", expires_at=now)

        assert auth.is_expired(now)
        assert not auth.is_expired(now - timedelta(seconds=1))
        assert not AuthCredentials.create_bearer("t").is_expired(now)

    def test_naive_expiry_is_treated_as_utc(self, now):
        """Test naive datetimes are made timezone aware."""
        auth = AuthCredentials.create_api_key("k", expires_at=datetime(2026, 3, 1, 12, 0))

        assert auth.expires_at == now

    def test_needs_refresh_window(self, now):
        """Test refreshable credentials within five minutes of expiry need refresh."""
        soon = AuthCredentials.create_oauth2("a", "r", expires_at=now + timedelta(minutes=4))
        later = AuthCredentials.create_oauth2("a", "r", expires_at=now + timedelta(minutes=6))
        no_refresh_token = AuthCredentials.create_oauth2(
            "a", expires_at=now + timedelta(minutes=4)
        )

        assert soon.needs_refresh(now)
        assert not later.needs_refresh(now)
        assert not no_refresh_token.is_refreshable()
        assert not no_refresh_token.needs_refresh(now)

    def test_refresh_with_keeps_refresh_token_and_scopes(self, now):
        """Test a refresh carries over what the server did not reissue."""
        auth = AuthCredentials.create_oauth2("a1", "r1", now, scopes=["read"])

        fresh = auth.refresh_with("a2", now + timedelta(hours=1))

        assert fresh.credentials == {"access_token": "a2"}
        assert fresh.refresh_token == "r1"
        assert fresh.scopes == ["read"]

    def test_refresh_with_requires_refreshable(self):
        """Test API keys cannot be refreshed."""
        with pytest.raises(ValidationError):
            AuthCredentials.create_api_key("k").refresh_with("a2")

    def test_serialization_hides_secrets(self, now):
        """Test secrets appear only when requested and survive a round trip."""
        auth = AuthCredentials.create_oauth2("a1", "r1", now)

        public = auth.to_dict()
        private = auth.to_dict(include_secrets=True)

        assert "credentials" not in public
        assert public["credentialKeys"] == ["access_token"]
        assert AuthCredentials.from_dict(private) == auth
        assert "a1" not in repr(auth)


class TestIntegrationConfig:
    """Test configuration completeness."""

    def test_problems(self):
        """Test each missing part is listed."""
        config = IntegrationConfig(
            IntegrationType.API,
            rate_limits=RateLimits(0, 100),
            retry_policy=RetryPolicy(3, 2.0, 0),
        )

        assert config.problems() == [
            "At least one endpoint is required",
            "Authentication credentials are required",
            "Requests per minute must be positive",
            "Retry max delay must be positive",
        ]

    def test_with_changes(self):
        """Test a changed copy leaves the original intact."""
        config = IntegrationConfig(
            IntegrationType.API, [ApiEndpoint("https://api.example.com")]
        )

        changed = config.with_changes(timeout_ms=5000)

        assert changed.timeout_ms == 5000
        assert config.timeout_ms is None
        assert changed.endpoints == config.endpoints

    def test_retry_policy_delay_is_capped(self):
        """Test exponential delay respects the maximum."""
        policy = RetryPolicy(5, 2.0, 5000)

        assert [policy.delay_for_attempt(n) for n in (1, 2, 3, 4)] == [1000, 2000, 4000, 5000]


class TestSyncSchedule:
    """Test schedule validation and next-run computation."""

    @pytest.fixture
    def moment(self):
        return datetime(2026, 3, 1, 12, 30, tzinfo=UTC)

    def test_interval_minimum(self):
        """Test intervals shorter than a minute are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            SyncSchedule.every(59_999)

        assert exc_info.value.message == "Interval must be at least 60000 ms (1 minute)"

    @pytest.mark.parametrize("expression", ["* * *", "61 * * * *", "* * * * * * *"])
    def test_invalid_cron(self, expression):
        """Test malformed cron expressions are rejected."""
        with pytest.raises(ValidationError):
            SyncSchedule.cron(expression)

    def test_unknown_timezone(self):
        """Test timezone names are checked."""
        with pytest.raises(ValidationError):
            SyncSchedule.cron("0 * * * *", "Mars/Olympus")

    def test_next_run(self, moment):
        """Test manual, interval and cron schedules."""
        assert SyncSchedule.manual().next_run_after(moment) is None
        assert SyncSchedule.every(60_000).next_run_after(moment) == moment + timedelta(
            minutes=1
        )
        assert SyncSchedule.cron("0 * * * *").next_run_after(moment) == datetime(
            2026, 3, 1, 13, 0, tzinfo=UTC
        )

    def test_cron_in_timezone(self, moment):
        """Test cron fields are read in the schedule's timezone."""
        schedule = SyncSchedule.cron("0 9 * * *", "Europe/Berlin")

        # 09:00 in Berlin is 08:00 UTC in March.
        assert schedule.next_run_after(moment) == datetime(2026, 3, 2, 8, 0, tzinfo=UTC)

    def test_disabled_schedule_never_fires(self, moment):
        """Test a disabled schedule has no next run."""
        schedule = SyncSchedule.every(60_000).with_enabled(False)

        assert schedule.next_run_after(moment) is None

    def test_expected_interval(self, moment):
        """Test the gap between runs."""
        assert SyncSchedule.cron("*/15 * * * *").expected_interval(moment) == timedelta(
            minutes=15
        )
        assert SyncSchedule.manual().expected_interval(moment) is None


class TestDataSchema:
    """Test schema construction and record validation."""

    @pytest.fixture
    def schema(self):
        return DataSchema(
            "customer",
            "1",
            [
                FieldDefinition("name", FieldType.STRING, required=True),
                FieldDefinition("age", FieldType.NUMBER),
                FieldDefinition("vip", FieldType.BOOLEAN),
                FieldDefinition("since", FieldType.DATE),
                FieldDefinition("tags", FieldType.ARRAY),
                FieldDefinition("address", FieldType.OBJECT),
            ],
        )

    def test_valid_record(self, schema):
        """Test a conforming record passes."""
        record = {
            "name": "Ada",
            "age": 36,
            "vip": True,
            "since": "2020-01-31",
            "tags": ["a"],
            "address": {"city": "London"},
        }

        assert schema.validate_data(record).is_valid

    def test_missing_and_mistyped_fields(self, schema):
        """Test required and type checks."""
        result = schema.validate_data({"name": None, "age": True, "tags": "a"})

        assert result.errors == [
            "Required field 'name' is missing",
            "Field 'age' must be of type number",
            "Field 'tags' must be of type array",
        ]

    def test_duplicate_fields_are_rejected(self):
        """Test field names are unique."""
        with pytest.raises(ValidationError):
            DataSchema(
                "s",
                "1",
                [FieldDefinition("a", FieldType.STRING), FieldDefinition("a", FieldType.NUMBER)],
            )

    def test_schema_needs_fields(self):
        """Test empty schemas are rejected."""
        with pytest.raises(ValidationError):
            DataSchema("s", "1", [])


class TestFieldPath:
    """Test dot-notation paths."""

    def test_resolve_and_assign(self):
        """Test nested reads and writes create intermediate objects."""
        target = {}

        FieldPath.parse("customer.address.city").assign(target, "London")

        assert target == {"customer": {"address": {"city": "London"}}}
        assert FieldPath.parse("customer.address.city").resolve(target) == "London"

    def test_assign_through_scalar_fails(self):
        """Test writing beneath a scalar is rejected."""
        with pytest.raises(ValidationError):
            FieldPath.parse("name.first").assign({"name": "Ada"}, "A")

    @pytest.mark.parametrize("path", ["", "a..b", ".a"])
    def test_invalid_paths(self, path):
        """Test empty segments are rejected."""
        with pytest.raises(ValidationError):
            FieldPath.parse(path)
