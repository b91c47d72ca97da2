"""
Teams directory provider backed by the MicrosoftTeams PowerShell module.

Each operation signs in with the tenant's certificate credentials, runs one
script, and signs out. Results come back as JSON on stdout.
"""

import json
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any

from src.db.credentials.schemas import (
    ConnectionTestResult,
    PowerShellCertificateCredentials,
)
from src.integrations.teams.base import TeamsDirectory
from src.integrations.teams.config import TeamsSettings, get_teams_settings
from src.integrations.teams.constants import (
    POLICY_TAG_PREFIX,
    POLICY_TYPES,
    PolicyType,
)
from src.integrations.teams.exceptions import (
    TeamsError,
    TeamsResponseError,
    TeamsScriptError,
)
from src.integrations.teams.powershell import (
    ScriptRunner,
    build_certificate_script,
    error_message,
    here_string,
    parse_json_output,
    run_script,
)
from src.integrations.teams.schemas import TeamsPolicy
from src.utils.logger import logger
from src.workflows.schemas import (
    AssignmentRequest,
    AssignmentResult,
    PhoneNumberRecord,
    RoutingPolicy,
)
from src.workflows.validation import TEL_PREFIX, normalize_line_uri

CredentialsLoader = Callable[[str], Awaitable[PowerShellCertificateCredentials]]

DIRECTORY_SCRIPT = """\
    $users = Get-CsOnlineUser | Where-Object { $_.LineURI }
    $results = $users | ForEach-Object {
        [PSCustomObject]@{
            LineURI = $_.LineURI
            DisplayName = $_.DisplayName
            UserPrincipalName = $_.UserPrincipalName
            OnlineVoiceRoutingPolicy = $_.OnlineVoiceRoutingPolicy
        }
    }
    $results | ConvertTo-Json -Depth 5
"""

BULK_ASSIGNMENT_SCRIPT = """\
    $assignments = {assignments} | ConvertFrom-Json
    $results = @()
    foreach ($assignment in $assignments) {{
        $result = [ordered]@{{ UserId = $assignment.UserId; Success = $false; Error = $null }}
        try {{
            Set-CsPhoneNumberAssignment `
                -Identity $assignment.UserId `
                -PhoneNumber $assignment.PhoneNumber `
                -PhoneNumberType DirectRouting `
                -ErrorAction Stop
        }} catch {{
            $result.Error = "Phone number assignment failed: $($_.Exception.Message)"
            $results += [PSCustomObject]$result
            continue
        }}
        try {{
            Grant-CsOnlineVoiceRoutingPolicy `
                -Identity $assignment.UserId `
                -PolicyName $assignment.PolicyName `
                -ErrorAction Stop
            $result.Success = $true
        }} catch {{
            $result.Error = "Voice routing policy assignment failed: $($_.Exception.Message)"
        }}
        $results += [PSCustomObject]$result
    }}
    ConvertTo-Json -InputObject @($results) -Depth 3
"""

POLICY_SCRIPT = """\
    $policies = {cmdlet}
    $policies | Select-Object {properties} | ConvertTo-Json -Depth 3
"""

CONNECTION_TEST_SCRIPT = """\
    $tenant = Get-CsTenant
    Write-Output "Connected to tenant: $($tenant.DisplayName)"
"""


def _policy_name(value: Any) -> str | None:
    """Routing policy as reported by Get-CsOnlineUser: a string or an object."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        return value.get("Name") or None
    return None


def _strip_tag(identity: str) -> str:
    return identity.removeprefix(POLICY_TAG_PREFIX)


def to_record(item: dict[str, Any]) -> PhoneNumberRecord:
    return PhoneNumberRecord(
        line_uri=normalize_line_uri(item["LineURI"]),
        display_name=item.get("DisplayName") or None,
        user_principal_name=item.get("UserPrincipalName") or None,
        policy=_policy_name(item.get("OnlineVoiceRoutingPolicy")),
    )


class PowerShellTeamsDirectory(TeamsDirectory):
    """Runs MicrosoftTeams cmdlets under certificate authentication."""

    def __init__(
        self,
        credentials_loader: CredentialsLoader,
        settings: TeamsSettings | None = None,
        runner: ScriptRunner | None = None,
    ):
        """
        Initialize the provider.

        Args:
            credentials_loader: Resolves a tenant id to certificate credentials
            settings: Teams settings (defaults to the global instance)
            runner: Script executor, replaceable in tests
        """
        self.credentials_loader = credentials_loader
        self.settings = settings or get_teams_settings()
        self.runner = runner or partial(run_script, pwsh_path=self.settings.pwsh_path)

    async def _execute(
        self, tenant_id: str, body: str, timeout_seconds: float | None = None
    ) -> str:
        credentials = await self.credentials_loader(tenant_id)
        script = build_certificate_script(credentials, body)
        result = await self.runner(
            script, timeout_seconds or self.settings.script_timeout_seconds
        )
        if not result.success:
            message = error_message(result)
            logger.error(
                "PowerShell script failed",
                tenant_id=tenant_id,
                exit_code=result.exit_code,
                error=message,
            )
            raise TeamsScriptError(message, result.exit_code, result.stderr)
        return result.stdout

    async def fetch_remote_directory(self, tenant_id: str) -> list[PhoneNumberRecord]:
        output = await self._execute(tenant_id, DIRECTORY_SCRIPT)
        items = parse_json_output(output)
        try:
            records = [to_record(item) for item in items if item.get("LineURI")]
        except (KeyError, ValueError) as e:
            raise TeamsResponseError(f"Unexpected directory entry: {e}") from e
        logger.info("Fetched Teams directory", tenant_id=tenant_id, count=len(records))
        return records

    async def fetch_policies(
        self, tenant_id: str, policy_type: PolicyType
    ) -> list[TeamsPolicy]:
        config = POLICY_TYPES[policy_type]
        properties = "Identity, Description" if config.supports_description else "Identity"
        body = POLICY_SCRIPT.format(cmdlet=config.get_cmdlet, properties=properties)

        items = parse_json_output(await self._execute(tenant_id, body))
        return [
            TeamsPolicy(
                identity=item["Identity"],
                name=_strip_tag(item["Identity"]),
                description=item.get("Description") or None,
            )
            for item in items
            if item.get("Identity")
        ]

    async def fetch_routing_policies(self, tenant_id: str) -> list[RoutingPolicy]:
        policies = await self.fetch_policies(tenant_id, PolicyType.VOICE_ROUTING)
        return [
            RoutingPolicy(id=p.identity, name=p.name, description=p.description)
            for p in policies
        ]

    async def submit_bulk_assignment(
        self, tenant_id: str, assignments: list[AssignmentRequest]
    ) -> list[AssignmentResult]:
        payload = json.dumps(
            [
                {
                    "UserId": a.user_id,
                    "PhoneNumber": a.phone_number.removeprefix(TEL_PREFIX),
                    "PolicyName": _strip_tag(a.routing_policy),
                }
                for a in assignments
            ]
        )
        body = BULK_ASSIGNMENT_SCRIPT.format(assignments=here_string(payload))

        logger.info(
            "Submitting bulk assignment", tenant_id=tenant_id, count=len(assignments)
        )
        items = parse_json_output(await self._execute(tenant_id, body))

        names = {a.user_id: a.user_name for a in assignments}
        results = []
        for item in items:
            user_id = item.get("UserId")
            if not user_id:
                continue
            results.append(
                AssignmentResult(
                    user_id=user_id,
                    user_name=names.get(user_id),
                    success=bool(item.get("Success")),
                    error=item.get("Error") or None,
                )
            )
        return results

    async def test_connection(self, tenant_id: str) -> ConnectionTestResult:
        try:
            output = await self._execute(
                tenant_id,
                CONNECTION_TEST_SCRIPT,
                self.settings.connection_test_timeout_seconds,
            )
        except TeamsError as e:
            logger.warning(
                "Teams connection test failed", tenant_id=tenant_id, error=e.message
            )
            return ConnectionTestResult(success=False, message=e.message)

        lines = [line.strip() for line in output.splitlines() if line.strip()]
        return ConnectionTestResult(
            success=True, message=lines[-1] if lines else "Connected to Microsoft Teams"
        )
