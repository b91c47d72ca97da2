"""Tests for the PowerShell Teams directory provider with a fake script runner."""

import json

import pytest

from src.db.credentials.schemas import PowerShellCertificateCredentials
from src.integrations.teams.config import TeamsSettings
from src.integrations.teams.constants import PolicyType
from src.integrations.teams.exceptions import (
    TeamsResponseError,
    TeamsScriptError,
    TeamsScriptTimeoutError,
)
from src.integrations.teams.providers.powershell import PowerShellTeamsDirectory
from src.integrations.teams.schemas import ScriptResult
from src.workflows.schemas import AssignmentRequest


class FakeRunner:
    def __init__(self, *results: ScriptResult | Exception):
        self.results = list(results)
        self.calls: list[tuple[str, float]] = []

    async def __call__(self, script: str, timeout_seconds: float) -> ScriptResult:
        self.calls.append((script, timeout_seconds))
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


async def load_credentials(tenant_id: str) -> PowerShellCertificateCredentials:
    return PowerShellCertificateCredentials(
        app_id="app-1",
        certificate_thumbprint="THUMB",
        azure_tenant_id=f"azure-{tenant_id}",
    )


def ok(payload) -> ScriptResult:
    return ScriptResult(exit_code=0, stdout=json.dumps(payload))


def make_directory(runner: FakeRunner) -> PowerShellTeamsDirectory:
    settings = TeamsSettings(script_timeout_seconds=60, connection_test_timeout_seconds=10)
    return PowerShellTeamsDirectory(load_credentials, settings, runner)


class TestFetchRemoteDirectory:
    @pytest.mark.asyncio
    async def test_normalizes_records(self):
        runner = FakeRunner(
            ok(
                [
                    {
                        "LineURI": "tel:+15551230001;ext=1",
                        "DisplayName": "Alice",
                        "UserPrincipalName": "alice@contoso.example",
                        "OnlineVoiceRoutingPolicy": {"Name": "US-National"},
                    },
                    {
                        "LineURI": "5551230002",
                        "DisplayName": "",
                        "UserPrincipalName": "bob@contoso.example",
                        "OnlineVoiceRoutingPolicy": None,
                    },
                    {"LineURI": None, "DisplayName": "No number"},
                ]
            )
        )

        records = await make_directory(runner).fetch_remote_directory("t1")

        assert [r.line_uri for r in records] == [
            "tel:+15551230001",
            "tel:+15551230002",
        ]
        assert records[0].policy == "US-National"
        assert records[1].display_name is None
        assert records[1].policy is None

        script, timeout = runner.calls[0]
        assert "-TenantId 'azure-t1'" in script
        assert "Get-CsOnlineUser" in script
        assert timeout == 60

    @pytest.mark.asyncio
    async def test_single_user_output(self):
        runner = FakeRunner(ok({"LineURI": "tel:+15551230001"}))

        records = await make_directory(runner).fetch_remote_directory("t1")

        assert len(records) == 1

    @pytest.mark.asyncio
    async def test_script_failure(self):
        runner = FakeRunner(
            ScriptResult(exit_code=1, stderr="AADSTS700027: certificate expired")
        )

        with pytest.raises(TeamsScriptError) as exc_info:
            await make_directory(runner).fetch_remote_directory("t1")

        assert exc_info.value.message == "AADSTS700027: certificate expired"
        assert exc_info.value.exit_code == 1

    @pytest.mark.asyncio
    async def test_unparseable_output(self):
        runner = FakeRunner(ScriptResult(exit_code=0, stdout="not json"))

        with pytest.raises(TeamsResponseError):
            await make_directory(runner).fetch_remote_directory("t1")


class TestFetchPolicies:
    @pytest.mark.asyncio
    async def test_routing_policies_strip_tag(self):
        runner = FakeRunner(
            ok(
                [
                    {"Identity": "Global", "Description": ""},
                    {"Identity": "Tag:US-National", "Description": "Domestic"},
                ]
            )
        )

        policies = await make_directory(runner).fetch_routing_policies("t1")

        assert [(p.id, p.name) for p in policies] == [
            ("Global", "Global"),
            ("Tag:US-National", "US-National"),
        ]
        assert policies[1].description == "Domestic"
        assert "Get-CsOnlineVoiceRoutingPolicy" in runner.calls[0][0]

    @pytest.mark.asyncio
    async def test_policy_without_description(self):
        runner = FakeRunner(ok([{"Identity": "Tag:Music"}]))

        policies = await make_directory(runner).fetch_policies(
            "t1", PolicyType.CALL_HOLD
        )

        script = runner.calls[0][0]
        assert "Get-CsTeamsCallHoldPolicy" in script
        assert "Select-Object Identity |" in script
        assert policies[0].name == "Music"


class TestSubmitBulkAssignment:
    @pytest.mark.asyncio
    async def test_payload_and_results(self):
        runner = FakeRunner(
            ok(
                [
                    {"UserId": "alice@contoso.example", "Success": True, "Error": None},
                    {
                        "UserId": "bob@contoso.example",
                        "Success": False,
                        "Error": "Voice routing policy assignment failed: not found",
                    },
                ]
            )
        )
        assignments = [
            AssignmentRequest(
                user_id="alice@contoso.example",
                user_name="Alice",
                phone_number="tel:+15551230001",
                routing_policy="Tag:US-National",
            ),
            AssignmentRequest(
                user_id="bob@contoso.example",
                phone_number="tel:+15551230002",
                routing_policy="US-National",
            ),
        ]

        results = await make_directory(runner).submit_bulk_assignment("t1", assignments)

        assert results[0].success is True
        assert results[0].user_name == "Alice"
        assert results[1].success is False
        assert "not found" in results[1].error

        script = runner.calls[0][0]
        start = script.index("@'\n") + 3
        payload = json.loads(script[start : script.index("\n'@")])
        assert payload == [
            {
                "UserId": "alice@contoso.example",
                "PhoneNumber": "+15551230001",
                "PolicyName": "US-National",
            },
            {
                "UserId": "bob@contoso.example",
                "PhoneNumber": "+15551230002",
                "PolicyName": "US-National",
            },
        ]
        assert "-PhoneNumberType DirectRouting" in script

    @pytest.mark.asyncio
    async def test_empty_output_means_no_results(self):
        runner = FakeRunner(ScriptResult(exit_code=0, stdout=""))
        assignments = [
            AssignmentRequest(
                user_id="alice", phone_number="tel:+15551230001", routing_policy="P"
            )
        ]

        results = await make_directory(runner).submit_bulk_assignment("t1", assignments)

        assert results == []


class TestConnectionTest:
    @pytest.mark.asyncio
    async def test_success_reports_tenant(self):
        runner = FakeRunner(
            ScriptResult(exit_code=0, stdout="Connected to tenant: Contoso\n")
        )

        result = await make_directory(runner).test_connection("t1")

        assert result.success is True
        assert result.message == "Connected to tenant: Contoso"
        assert runner.calls[0][1] == 10

    @pytest.mark.asyncio
    async def test_failure_is_reported_not_raised(self):
        runner = FakeRunner(TeamsScriptTimeoutError(10))

        result = await make_directory(runner).test_connection("t1")

        assert result.success is False
        assert "timed out" in result.message
