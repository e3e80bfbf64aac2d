"""Tests for the read-only GCP tools."""

import json
from unittest.mock import AsyncMock

import pytest

from hi_gcloud.core.exceptions import ErrorKind, GcloudError
from hi_gcloud.core.models import ExecResult
from hi_gcloud.tools.auth_tools import auth_status
from hi_gcloud.tools.billing_tools import billing_info
from hi_gcloud.tools.logging_tools import clamp_limit, logs_read, parse_log_entry, run_logs
from hi_gcloud.tools.prompts import auth_status_resource, check_errors_prompt, debug_deployment_prompt
from hi_gcloud.tools.run_tools import parse_service, run_status
from hi_gcloud.tools.secret_tools import secret_list
from hi_gcloud.tools.services_tools import categorize, services_list
from hi_gcloud.tools.storage_tools import parse_ls_output, storage_list


LOG_ENTRIES = [
    {
        "timestamp": "2024-05-01T06:00:00.123Z",
        "severity": "ERROR",
        "textPayload": "Connection refused",
        "resource": {"type": "cloud_run_revision", "labels": {"revision_name": "api-00042-abc"}},
    },
    {
        "timestamp": "2024-05-01T05:59:00Z",
        "severity": "INFO",
        "jsonPayload": {"message": "request served"},
        "resource": {"type": "cloud_run_revision", "labels": {"revision_name": "api-00042-abc"}},
    },
    {
        "receiveTimestamp": "2024-05-01T05:58:00Z",
        "jsonPayload": {"latency": "1s"},
        "resource": {"type": "gce_instance"},
    },
]

RUN_SERVICE = {
    "metadata": {
        "name": "api",
        "creationTimestamp": "2024-04-30T10:00:00Z",
        "labels": {"cloud.googleapis.com/location": "asia-northeast3"},
    },
    "spec": {"template": {"spec": {"containers": [{"image": "gcr.io/p/api:1.2"}]}}},
    "status": {
        "url": "https://api-xyz.a.run.app",
        "latestReadyRevisionName": "api-00042-abc",
        "conditions": [{"type": "Ready", "status": "True"}],
        "traffic": [
            {"revisionName": "api-00042-abc", "percent": 90},
            {"latestRevision": True, "percent": 10},
            {"percent": 0},
        ],
    },
}


class TestLogsRead:

    @pytest.mark.asyncio
    async def test_gcloud_arguments(self, ctx):
        await logs_read(ctx, filter="severity=ERROR", project_id="p", time_range="6h", limit=20)

        args, timeout = ctx.client.execute_json.call_args[0]
        assert args[:2] == ["logging", "read"]
        assert args[2].startswith('timestamp>="')
        assert args[2].endswith('" AND (severity=ERROR)')
        assert args[3:] == ["--project=p", "--limit=20", "--format=json"]
        assert timeout == 60

    @pytest.mark.asyncio
    async def test_text_report(self, ctx):
        ctx.client.execute_json.return_value = LOG_ENTRIES

        response = await logs_read(ctx, project_id="p")

        assert response.is_error is False
        assert "Total: 3 log entries" in response.text
        assert "🔴 Found 1 error(s)." in response.text
        assert "Connection refused" in response.text
        assert "request served" in response.text

    @pytest.mark.asyncio
    async def test_json_report(self, ctx):
        ctx.client.execute_json.return_value = LOG_ENTRIES

        response = await logs_read(ctx, project_id="p", output_format="json")

        payload = json.loads(response.text)
        assert payload["total_logs"] == 3
        assert payload["has_errors"] is True
        assert payload["errors"][0]["resource"] == "cloud_run_revision"
        assert payload["logs"][2]["severity"] == "DEFAULT"
        assert payload["logs"][2]["message"] == '{"latency": "1s"}'

    @pytest.mark.asyncio
    async def test_empty_result(self, ctx):
        response = await logs_read(ctx, project_id="p")

        assert "No logs found." in response.text
        assert "✅ No errors found." in response.text

    @pytest.mark.parametrize("limit,expected", [(None, 50), (0, 50), (-3, 50), (20, 20), (10000, 500)])
    def test_clamp_limit(self, limit, expected):
        assert clamp_limit(limit) == expected

    def test_parse_entry_uses_receive_timestamp(self):
        entry = parse_log_entry(LOG_ENTRIES[2], None)

        assert entry.timestamp == "2024-05-01T05:58:00Z"


class TestRunLogs:

    @pytest.mark.asyncio
    async def test_filter_with_severity_and_region(self, ctx):
        await run_logs(ctx, service="api", region="asia-northeast3", project_id="p", severity="error")

        log_filter = ctx.client.execute_json.call_args[0][0][2]
        assert log_filter.startswith('resource.type="cloud_run_revision" AND resource.labels.service_name="api"')
        assert 'AND severity="ERROR"' in log_filter
        assert log_filter.endswith('AND resource.labels.location="asia-northeast3"')

    @pytest.mark.asyncio
    async def test_all_severities(self, ctx):
        await run_logs(ctx, service="api", project_id="p")

        log_filter = ctx.client.execute_json.call_args[0][0][2]
        assert "severity=" not in log_filter
        assert "location" not in log_filter

    @pytest.mark.asyncio
    async def test_region_from_config_file(self, ctx, write_config):
        write_config({"project_id": "p", "region": "europe-west1"})

        await run_logs(ctx, service="api")

        log_filter = ctx.client.execute_json.call_args[0][0][2]
        assert 'resource.labels.location="europe-west1"' in log_filter
        assert "--project=p" in ctx.client.execute_json.call_args[0][0]

    @pytest.mark.asyncio
    async def test_resource_is_revision(self, ctx):
        ctx.client.execute_json.return_value = LOG_ENTRIES[:1]

        response = await run_logs(ctx, service="api", project_id="p", output_format="json")

        assert json.loads(response.text)["logs"][0]["resource"] == "api-00042-abc"

    @pytest.mark.asyncio
    async def test_service_required(self, ctx):
        response = await run_logs(ctx, project_id="p")

        assert response.is_error is True
        assert "service is required." in response.text
        ctx.client.execute_json.assert_not_called()


class TestRunStatus:

    def test_parse_service(self):
        status = parse_service(RUN_SERVICE, "api", None)

        assert status.url == "https://api-xyz.a.run.app"
        assert status.region == "asia-northeast3"
        assert status.revision == "api-00042-abc"
        assert status.status == "Ready"
        assert status.container_image == "gcr.io/p/api:1.2"
        assert [(t.revision_name, t.percent) for t in status.traffic] == [
            ("api-00042-abc", 90),
            ("latest", 10),
            ("unknown", 0),
        ]

    def test_parse_empty_document(self):
        status = parse_service({}, "api", "us-central1")

        assert status.name == "api"
        assert status.url == "N/A"
        assert status.status == "Not Ready"
        assert status.region == "us-central1"

    @pytest.mark.asyncio
    async def test_describe_arguments(self, ctx):
        ctx.client.execute_json.return_value = RUN_SERVICE

        response = await run_status(ctx, service="api", region="asia-northeast3", project_id="p")

        args = ctx.client.execute_json.call_args[0][0]
        assert args == [
            "run", "services", "describe", "api",
            "--project=p", "--format=json", "--region=asia-northeast3",
        ]
        assert "📦 Service: api" in response.text
        assert "  - latest: 10%" in response.text

    @pytest.mark.asyncio
    async def test_json_includes_raw(self, ctx):
        ctx.client.execute_json.return_value = RUN_SERVICE

        response = await run_status(ctx, service="api", project_id="p", output_format="json")

        payload = json.loads(response.text)
        assert payload["status"] == "Ready"
        assert payload["raw"] == RUN_SERVICE


class TestStorageList:

    LS_OUTPUT = (
        "      1024  2024-05-01T06:00:00Z  gs://my-bucket/logs/app.log\n"
        "         0  2024-05-01T06:00:00Z  gs://my-bucket/empty.txt\n"
        "                                 gs://my-bucket/images/\n"
        "TOTAL: 2 objects, 1024 bytes (1 KiB)\n"
    )

    def test_parse_ls_output(self):
        objects = parse_ls_output(self.LS_OUTPUT, "my-bucket")

        assert objects == [
            {"name": "logs/app.log", "size": 1024, "created": "2024-05-01T06:00:00Z"},
            {"name": "empty.txt", "size": 0, "created": "2024-05-01T06:00:00Z"},
            {"name": "images/", "size": 0, "is_directory": True},
        ]

    @pytest.mark.asyncio
    async def test_list_objects(self, ctx):
        ctx.client.execute.return_value = ExecResult(stdout=self.LS_OUTPUT)

        response = await storage_list(ctx, bucket="my-bucket", prefix="logs", project_id="p")

        args = ctx.client.execute.call_args[0][0]
        assert args == ["storage", "ls", "-l", "gs://my-bucket/logs", "--project=p"]
        assert "📄 logs/app.log (1.00 KB)" in response.text
        assert "📂 images/" in response.text

    @pytest.mark.asyncio
    async def test_list_buckets(self, ctx):
        ctx.client.execute_json.return_value = [
            {"name": "b1", "location": "ASIA-NORTHEAST3", "storageClass": "STANDARD"},
            {"id": "b2"},
        ]

        response = await storage_list(ctx, project_id="p", output_format="json")

        payload = json.loads(response.text)
        assert payload["total_buckets"] == 2
        assert [b["name"] for b in payload["buckets"]] == ["b1", "b2"]

    @pytest.mark.asyncio
    async def test_no_buckets(self, ctx):
        response = await storage_list(ctx, project_id="p")

        assert "No buckets found." in response.text


class TestSecretList:

    @pytest.mark.asyncio
    async def test_list_secrets(self, ctx):
        ctx.client.execute_json.return_value = [{"name": "projects/p/secrets/db-password"}]

        response = await secret_list(ctx, project_id="p")

        assert ctx.client.execute_json.call_args[0][0] == ["secrets", "list", "--project=p", "--format=json"]
        assert "🔑 db-password" in response.text

    @pytest.mark.asyncio
    async def test_list_versions(self, ctx):
        ctx.client.execute_json.return_value = [
            {"name": "projects/p/secrets/s/versions/2", "state": "ENABLED"},
            {"name": "projects/p/secrets/s/versions/1", "state": "DESTROYED"},
        ]

        response = await secret_list(ctx, secret_name="s", project_id="p", output_format="json")

        payload = json.loads(response.text)
        assert [v["name"] for v in payload["versions"]] == ["2", "1"]

    @pytest.mark.asyncio
    async def test_access_value(self, ctx):
        ctx.client.execute.return_value = ExecResult(stdout="hunter2\n")

        response = await secret_list(ctx, secret_name="s", project_id="p", show_value=True)

        args = ctx.client.execute.call_args[0][0]
        assert args == ["secrets", "versions", "access", "latest", "--secret=s", "--project=p"]
        assert response.text.endswith("Value:\nhunter2")

    @pytest.mark.asyncio
    async def test_no_secrets(self, ctx):
        response = await secret_list(ctx, project_id="p")

        assert "No secrets found." in response.text


class TestServicesList:

    @pytest.mark.parametrize("name,category", [
        ("run.googleapis.com", "Compute"),
        ("storage.googleapis.com", "Storage"),
        ("sqladmin.googleapis.com", "Database"),
        ("secretmanager.googleapis.com", "Security"),
        ("cloudbilling.googleapis.com", "Other"),
    ])
    def test_categorize(self, name, category):
        assert categorize(name) == category

    @pytest.mark.asyncio
    async def test_grouped_and_filtered(self, ctx):
        ctx.client.execute_json.return_value = [
            {"name": "projects/1/services/run.googleapis.com",
             "config": {"name": "run.googleapis.com", "title": "Cloud Run Admin API"}, "state": "ENABLED"},
            {"name": "projects/1/services/storage.googleapis.com",
             "config": {"name": "storage.googleapis.com", "title": "Cloud Storage API"}, "state": "ENABLED"},
        ]

        response = await services_list(ctx, project_id="p", filter="run")

        assert "Total: 1" in response.text
        assert "📂 Compute:" in response.text
        assert "storage.googleapis.com" not in response.text


class TestBillingInfo:

    @pytest.mark.asyncio
    async def test_permission_denied_names_role(self, ctx):
        ctx.client.execute_json.side_effect = GcloudError(ErrorKind.PERMISSION_DENIED, "Permission denied.")

        response = await billing_info(ctx, project_id="p")

        assert response.is_error is True
        assert "roles/billing.viewer" in response.text

    @pytest.mark.asyncio
    async def test_other_errors_pass_through(self, ctx):
        ctx.client.execute_json.side_effect = GcloudError(ErrorKind.NOT_AUTHENTICATED, "GCP authentication is required.")

        response = await billing_info(ctx, project_id="p", output_format="json")

        assert json.loads(response.text)["error"]["kind"] == "NOT_AUTHENTICATED"

    @pytest.mark.asyncio
    async def test_billing_with_budget(self, ctx):
        ctx.client.execute_json.side_effect = [
            {"billingEnabled": True, "billingAccountName": "billingAccounts/0123-4567"},
            [{"displayName": "Monthly", "amount": {"specifiedAmount": {"currencyCode": "USD", "units": "100"}}}],
        ]

        response = await billing_info(ctx, project_id="p", output_format="json")

        payload = json.loads(response.text)
        assert payload["billing_enabled"] is True
        assert payload["budget"] == {"display_name": "Monthly", "amount": "100 USD"}
        budget_args = ctx.client.execute_json.call_args[0][0]
        assert "--billing-account=0123-4567" in budget_args

    @pytest.mark.asyncio
    async def test_budget_failure_is_not_fatal(self, ctx):
        ctx.client.execute_json.side_effect = [
            {"billingEnabled": False, "billingAccountName": "billingAccounts/0123"},
            GcloudError(ErrorKind.PERMISSION_DENIED, "Permission denied."),
        ]

        response = await billing_info(ctx, project_id="p")

        assert response.is_error is False
        assert "Billing enabled: no" in response.text


class TestAuthStatus:

    @pytest.mark.asyncio
    async def test_authenticated(self, ctx, gcloud_values):
        gcloud_values["project"] = "p"
        ctx.client.execute_json.return_value = {"compute": {"region": "asia-northeast3"}}

        response = await auth_status(ctx, output_format="json")

        payload = json.loads(response.text)
        assert payload == {
            "authenticated": True,
            "active_account": "user@example.com",
            "project": "p",
            "region": "asia-northeast3",
            "zone": "not set",
        }

    @pytest.mark.asyncio
    async def test_all_accounts(self, ctx):
        ctx.client.execute_json.return_value = {}
        ctx.client.execute = AsyncMock(side_effect=[
            ExecResult(stdout="me@example.com\n"),
            ExecResult(stdout="me@example.com\nci@example.com\n"),
        ])

        response = await auth_status(ctx, show_all_accounts=True)

        assert "→ me@example.com (active)" in response.text
        assert "ci@example.com" in response.text

    @pytest.mark.asyncio
    async def test_not_authenticated(self, ctx):
        ctx.client.execute.return_value = ExecResult(stdout="")

        response = await auth_status(ctx)

        assert response.is_error is True
        assert "gcloud auth login" in response.text

    @pytest.mark.asyncio
    async def test_not_installed(self, ctx):
        ctx.client.locate.side_effect = GcloudError(ErrorKind.NOT_INSTALLED, "gcloud CLI is not installed.")

        response = await auth_status(ctx, output_format="json")

        assert json.loads(response.text)["error"]["kind"] == "NOT_INSTALLED"

    @pytest.mark.asyncio
    async def test_resource_renders_errors_as_json(self, ctx):
        ctx.client.execute.return_value = ExecResult(stdout="")

        payload = json.loads(await auth_status_resource(ctx))

        assert payload["authenticated"] is False
        assert payload["error"]["kind"] == "NOT_AUTHENTICATED"


class TestPrompts:

    def test_debug_deployment(self):
        text = debug_deployment_prompt("api", "asia-northeast3")

        assert '"api"' in text
        assert "gcp_run_status" in text
        assert "Region: asia-northeast3" in text

    def test_check_errors_default_range(self):
        assert "time_range: 1h" in check_errors_prompt("")
