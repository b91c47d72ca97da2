"""Tests for PowerShell script building and output parsing."""

import asyncio
import json

import pytest

from src.db.credentials.schemas import PowerShellCertificateCredentials
from src.integrations.teams.exceptions import TeamsResponseError, TeamsScriptError
from src.integrations.teams.powershell import (
    build_certificate_script,
    error_message,
    here_string,
    parse_json_output,
    quote,
    run_script,
)
from src.integrations.teams.schemas import ScriptResult


class TestQuoting:
    def test_quote_doubles_single_quotes(self):
        assert quote("O'Brien") == "'O''Brien'"

    def test_quote_leaves_variables_inert(self):
        assert quote("$(Remove-Item C:\\)") == "'$(Remove-Item C:\\)'"

    def test_here_string_wraps_json(self):
        payload = json.dumps([{"UserId": "a'@b"}])

        rendered = here_string(payload)

        assert rendered.startswith("@'\n")
        assert rendered.endswith("\n'@")
        assert rendered.count("\n") == 2


class TestBuildCertificateScript:
    def test_signs_in_and_out(self):
        credentials = PowerShellCertificateCredentials(
            app_id="app-1",
            certificate_thumbprint="ABC123",
            azure_tenant_id="tenant-'x",
        )

        script = build_certificate_script(credentials, "    Get-CsTenant")

        assert "$ErrorActionPreference = 'Stop'" in script
        assert "-ApplicationId 'app-1'" in script
        assert "-CertificateThumbprint 'ABC123'" in script
        assert "-TenantId 'tenant-''x'" in script
        assert "    Get-CsTenant" in script
        assert script.count("Disconnect-MicrosoftTeams") == 2


class TestParseJsonOutput:
    def test_list(self):
        assert parse_json_output('[{"a": 1}, {"a": 2}]') == [{"a": 1}, {"a": 2}]

    def test_single_object_becomes_list(self):
        assert parse_json_output('{"a": 1}') == [{"a": 1}]

    def test_empty_output(self):
        assert parse_json_output("  \n") == []

    def test_banner_before_payload(self):
        output = "WARNING: module update available\n[{\"a\": 1}]"

        assert parse_json_output(output) == [{"a": 1}]

    def test_no_json(self):
        with pytest.raises(TeamsResponseError):
            parse_json_output("Connected to tenant")

    def test_invalid_json(self):
        with pytest.raises(TeamsResponseError):
            parse_json_output("{not json")

    def test_non_object_items(self):
        with pytest.raises(TeamsResponseError):
            parse_json_output("[1, 2]")


class TestErrorMessage:
    def test_prefers_last_stderr_line(self):
        result = ScriptResult(exit_code=1, stdout="ok", stderr="first\nAccess denied\n")

        assert error_message(result) == "Access denied"

    def test_falls_back_to_stdout(self):
        result = ScriptResult(exit_code=1, stdout="partial\nfailed here")

        assert error_message(result) == "failed here"

    def test_falls_back_to_exit_code(self):
        assert error_message(ScriptResult(exit_code=3)) == "PowerShell exited with code 3"


class TestRunScript:
    @pytest.mark.asyncio
    async def test_missing_executable(self):
        with pytest.raises(TeamsScriptError) as exc_info:
            await run_script(
                "Write-Output 1", 5, pwsh_path="/nonexistent/bin/pwsh"
            )

        assert exc_info.value.error_code == "SCRIPT_FAILED"

    @pytest.mark.asyncio
    async def test_cancellation_kills_process(self, monkeypatch):
        class HangingProcess:
            returncode = None

            def __init__(self):
                self.killed = False
                self.waited = False

            async def communicate(self):
                await asyncio.Event().wait()

            def kill(self):
                self.killed = True

            async def wait(self):
                self.waited = True
                return -9

        process = HangingProcess()

        async def create_subprocess_exec(*args, **kwargs):
            return process

        monkeypatch.setattr(
            asyncio, "create_subprocess_exec", create_subprocess_exec
        )

        with pytest.raises(TimeoutError):
            await asyncio.wait_for(run_script("Start-Sleep 600", 120), timeout=0.05)

        assert process.killed
        assert process.waited
