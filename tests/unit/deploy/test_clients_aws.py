"""Unit tests for the AWS (S3 + Elastic Beanstalk) collaborators."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError, WaiterError

from ebdeploy.deploy.clients import create_platform_clients, create_session
from ebdeploy.deploy.clients.aws import (
    BeanstalkEnvironmentController,
    BeanstalkVersionRegistry,
    S3ObjectStore,
)
from ebdeploy.lib.errors import MalformedResponseError, PlatformError
from ebdeploy.models.deployment import AWSSettings
from ebdeploy.models.events import EventSeverity


def _client_error(code: str, operation: str = "HeadBucket") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.fixture
def s3_client() -> MagicMock:
    client = MagicMock()
    client.meta.region_name = "eu-central-1"
    return client


@pytest.fixture
def eb_client() -> MagicMock:
    return MagicMock()


class TestS3ObjectStore:
    """Tests for S3ObjectStore."""

    def test_exists_true(self, s3_client, eb_client) -> None:
        store = S3ObjectStore(s3_client, eb_client)

        assert store.exists("shop-artifacts") is True
        s3_client.head_bucket.assert_called_once_with(Bucket="shop-artifacts")

    @pytest.mark.parametrize("code", ["404", "NotFound", "NoSuchBucket"])
    def test_exists_false_on_not_found(self, s3_client, eb_client, code) -> None:
        s3_client.head_bucket.side_effect = _client_error(code)

        assert S3ObjectStore(s3_client, eb_client).exists("shop-artifacts") is False

    def test_exists_propagates_other_errors(self, s3_client, eb_client) -> None:
        """Permission errors are not mistaken for a missing bucket."""
        s3_client.head_bucket.side_effect = _client_error("403")

        with pytest.raises(PlatformError) as exc_info:
            S3ObjectStore(s3_client, eb_client).exists("shop-artifacts")

        assert exc_info.value.code == "403"

    def test_exists_wraps_transport_errors(self, s3_client, eb_client) -> None:
        s3_client.head_bucket.side_effect = EndpointConnectionError(
            endpoint_url="https://s3.eu-central-1.amazonaws.com"
        )

        with pytest.raises(PlatformError) as exc_info:
            S3ObjectStore(s3_client, eb_client).exists("shop-artifacts")

        assert exc_info.value.code is None

    def test_create_sets_location_constraint(self, s3_client, eb_client) -> None:
        S3ObjectStore(s3_client, eb_client).create("shop-artifacts")

        s3_client.create_bucket.assert_called_once_with(
            Bucket="shop-artifacts",
            CreateBucketConfiguration={"LocationConstraint": "eu-central-1"},
        )

    def test_create_in_us_east_1(self, s3_client, eb_client) -> None:
        s3_client.meta.region_name = "us-east-1"

        S3ObjectStore(s3_client, eb_client).create("shop-artifacts")

        s3_client.create_bucket.assert_called_once_with(Bucket="shop-artifacts")

    def test_default_location(self, s3_client, eb_client) -> None:
        eb_client.create_storage_location.return_value = {
            "S3Bucket": "elasticbeanstalk-eu-central-1-123456789012"
        }

        location = S3ObjectStore(s3_client, eb_client).default_location()

        assert location == "elasticbeanstalk-eu-central-1-123456789012"
        eb_client.create_storage_location.assert_called_once_with()

    def test_default_location_malformed(self, s3_client, eb_client) -> None:
        eb_client.create_storage_location.return_value = {}

        with pytest.raises(MalformedResponseError):
            S3ObjectStore(s3_client, eb_client).default_location()

    def test_put_uploads_file_bytes(self, s3_client, eb_client, tmp_path) -> None:
        artifact = tmp_path / "v1.zip"
        artifact.write_bytes(b"FILEBODY")

        S3ObjectStore(s3_client, eb_client).put("shop-artifacts", "shop/v1.zip", artifact)

        s3_client.put_object.assert_called_once_with(
            Bucket="shop-artifacts", Key="shop/v1.zip", Body=b"FILEBODY"
        )

    def test_put_missing_file(self, s3_client, eb_client, tmp_path) -> None:
        with pytest.raises(PlatformError, match="Failed to read artifact"):
            S3ObjectStore(s3_client, eb_client).put(
                "shop-artifacts", "shop/v1.zip", tmp_path / "missing.zip"
            )
        s3_client.put_object.assert_not_called()

    def test_confirm_visible_uses_object_exists_waiter(
        self, s3_client, eb_client
    ) -> None:
        waiter = s3_client.get_waiter.return_value

        S3ObjectStore(s3_client, eb_client).confirm_visible("shop-artifacts", "shop/v1.zip")

        s3_client.get_waiter.assert_called_once_with("object_exists")
        waiter.wait.assert_called_once_with(Bucket="shop-artifacts", Key="shop/v1.zip")

    def test_confirm_visible_waiter_failure(self, s3_client, eb_client) -> None:
        s3_client.get_waiter.return_value.wait.side_effect = WaiterError(
            name="ObjectExists", reason="Max attempts exceeded", last_response={}
        )

        with pytest.raises(PlatformError, match="never became visible"):
            S3ObjectStore(s3_client, eb_client).confirm_visible(
                "shop-artifacts", "shop/v1.zip"
            )


class TestBeanstalkVersionRegistry:
    """Tests for BeanstalkVersionRegistry."""

    def test_exists_queries_label(self, eb_client) -> None:
        eb_client.describe_application_versions.return_value = {
            "ApplicationVersions": []
        }

        assert BeanstalkVersionRegistry(eb_client).exists("shop", "v1") is False
        eb_client.describe_application_versions.assert_called_once_with(
            ApplicationName="shop", VersionLabels=["v1"]
        )

    def test_exists_true_for_non_empty_list(self, eb_client) -> None:
        eb_client.describe_application_versions.return_value = {
            "ApplicationVersions": [{"VersionLabel": "v1"}]
        }

        assert BeanstalkVersionRegistry(eb_client).exists("shop", "v1") is True

    def test_exists_malformed_response(self, eb_client) -> None:
        """A response without the version list is an error, not False."""
        eb_client.describe_application_versions.return_value = {
            "UnknownResponse": "unknown"
        }

        with pytest.raises(MalformedResponseError) as exc_info:
            BeanstalkVersionRegistry(eb_client).exists("shop", "v1")

        assert exc_info.value.field == "ApplicationVersions"

    def test_register(self, eb_client) -> None:
        eb_client.create_application_version.return_value = {
            "ApplicationVersion": {"VersionLabel": "v1"}
        }

        label = BeanstalkVersionRegistry(eb_client).register(
            application_name="shop",
            version_label="v1",
            description="Release v1",
            location="shop-artifacts",
            key="shop/v1.zip",
        )

        assert label == "v1"
        eb_client.create_application_version.assert_called_once_with(
            ApplicationName="shop",
            VersionLabel="v1",
            Description="Release v1",
            SourceBundle={"S3Bucket": "shop-artifacts", "S3Key": "shop/v1.zip"},
            AutoCreateApplication=False,
        )

    def test_register_access_denied(self, eb_client) -> None:
        eb_client.create_application_version.side_effect = _client_error(
            "AccessDenied", "CreateApplicationVersion"
        )

        with pytest.raises(PlatformError) as exc_info:
            BeanstalkVersionRegistry(eb_client).register(
                application_name="shop",
                version_label="v1",
                description="",
                location="shop-artifacts",
                key="shop/v1.zip",
            )

        assert exc_info.value.operation == "register"
        assert exc_info.value.code == "AccessDenied"


class TestBeanstalkEnvironmentController:
    """Tests for BeanstalkEnvironmentController."""

    def test_activate(self, eb_client) -> None:
        BeanstalkEnvironmentController(eb_client).activate("shop-prod", "v1")

        eb_client.update_environment.assert_called_once_with(
            EnvironmentName="shop-prod", VersionLabel="v1"
        )

    def test_status(self, eb_client) -> None:
        eb_client.describe_environments.return_value = {
            "Environments": [{"EnvironmentName": "shop-prod", "Status": "Updating"}]
        }

        status = BeanstalkEnvironmentController(eb_client).status("shop", "shop-prod")

        assert status == "Updating"
        eb_client.describe_environments.assert_called_once_with(
            ApplicationName="shop", EnvironmentNames=["shop-prod"]
        )

    def test_status_unknown_environment(self, eb_client) -> None:
        eb_client.describe_environments.return_value = {"Environments": []}

        with pytest.raises(MalformedResponseError):
            BeanstalkEnvironmentController(eb_client).status("shop", "shop-prod")

    def test_events_parsed_newest_first(self, eb_client) -> None:
        since = datetime(2026, 1, 1, tzinfo=timezone.utc)
        eb_client.describe_events.return_value = {
            "Events": [
                {
                    "EventDate": datetime(2026, 1, 1, 0, 2, tzinfo=timezone.utc),
                    "Severity": "ERROR",
                    "Message": "Failed to deploy application.",
                },
                {
                    "EventDate": datetime(2026, 1, 1, 0, 1, tzinfo=timezone.utc),
                    "Severity": "INFO",
                    "Message": "Environment update is starting.",
                },
            ]
        }

        events = BeanstalkEnvironmentController(eb_client).events(
            "shop", "shop-prod", since
        )

        assert [event.severity for event in events] == [
            EventSeverity.ERROR,
            EventSeverity.INFO,
        ]
        assert events[1].signature == (
            "2026-01-01T00:01:00+00:00 [INFO] Environment update is starting."
        )
        eb_client.describe_events.assert_called_once_with(
            ApplicationName="shop", EnvironmentName="shop-prod", StartTime=since
        )

    def test_events_follow_pagination(self, eb_client) -> None:
        since = datetime(2026, 1, 1, tzinfo=timezone.utc)
        event = {"EventDate": since, "Severity": "INFO", "Message": "m"}
        eb_client.describe_events.side_effect = [
            {"Events": [event], "NextToken": "page-2"},
            {"Events": [dict(event, Message="n")]},
        ]

        events = BeanstalkEnvironmentController(eb_client).events(
            "shop", "shop-prod", since
        )

        assert [event.message for event in events] == ["m", "n"]
        second_call = eb_client.describe_events.call_args_list[1]
        assert second_call.kwargs["NextToken"] == "page-2"

    def test_events_unknown_severity(self, eb_client) -> None:
        eb_client.describe_events.return_value = {
            "Events": [
                {
                    "EventDate": datetime(2026, 1, 1, tzinfo=timezone.utc),
                    "Severity": "LOUD",
                    "Message": "?",
                }
            ]
        }

        with pytest.raises(MalformedResponseError):
            BeanstalkEnvironmentController(eb_client).events(
                "shop", "shop-prod", datetime(2026, 1, 1, tzinfo=timezone.utc)
            )


class TestClientFactory:
    """Tests for session and client creation."""

    @patch("boto3.session.Session")
    def test_session_without_credentials(self, mock_session: MagicMock) -> None:
        create_session(AWSSettings())

        mock_session.assert_called_once_with(region_name="eu-central-1")

    @patch("boto3.session.Session")
    def test_session_with_static_credentials(self, mock_session: MagicMock) -> None:
        create_session(
            AWSSettings(
                region="us-west-2",
                access_key_id="AKIAEXAMPLE",
                secret_access_key="secret",
                session_token="token",
            )
        )

        mock_session.assert_called_once_with(
            region_name="us-west-2",
            aws_access_key_id="AKIAEXAMPLE",
            aws_secret_access_key="secret",
            aws_session_token="token",
        )

    @patch("boto3.session.Session")
    def test_key_id_alone_is_ignored(self, mock_session: MagicMock) -> None:
        create_session(AWSSettings(access_key_id="AKIAEXAMPLE"))

        mock_session.assert_called_once_with(region_name="eu-central-1")

    @patch("boto3.session.Session")
    def test_create_platform_clients(self, mock_session: MagicMock) -> None:
        clients = create_platform_clients(AWSSettings())

        session = mock_session.return_value
        assert [call.args[0] for call in session.client.call_args_list] == [
            "s3",
            "elasticbeanstalk",
        ]
        assert isinstance(clients.object_store, S3ObjectStore)
        assert isinstance(clients.registry, BeanstalkVersionRegistry)
        assert isinstance(clients.controller, BeanstalkEnvironmentController)


def test_put_reads_path_object(tmp_path: Path) -> None:
    """Relative artifact paths are read as given."""
    artifact = tmp_path / "build.zip"
    artifact.write_bytes(b"PK")
    s3_client = MagicMock()

    S3ObjectStore(s3_client, MagicMock()).put("bucket-a", "app/build.zip", artifact)

    assert s3_client.put_object.call_args.kwargs["Body"] == b"PK"
