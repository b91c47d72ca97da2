"""
PowerShell script building and execution for the MicrosoftTeams module.

Scripts are written to a temporary file and run with ``pwsh -File`` so that
nothing tenant-specific appears on the command line. Every value interpolated
into a script goes through :func:`quote`.
"""

import asyncio
import json
import tempfile
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from src.db.credentials.schemas import PowerShellCertificateCredentials
from src.integrations.teams.constants import PWSH_ARGS
from src.integrations.teams.exceptions import (
    TeamsResponseError,
    TeamsScriptError,
    TeamsScriptTimeoutError,
)
from src.integrations.teams.schemas import ScriptResult
from src.utils.logger import logger

ScriptRunner = Callable[[str, float], Awaitable[ScriptResult]]

# Non-interactive hosts hang on confirmation prompts and progress rendering
ANTI_HANG_PREFIX = """\
$ErrorActionPreference = 'Stop'
$ConfirmPreference = 'None'
$ProgressPreference = 'SilentlyContinue'

if (Get-Module -Name PSReadLine) {
    Remove-Module PSReadLine -Force -ErrorAction SilentlyContinue
}
"""


def quote(value: str) -> str:
    """Render a value as a PowerShell single-quoted literal."""
    return "'" + str(value).replace("'", "''") + "'"


def here_string(value: str) -> str:
    """
    Render text as a literal here-string.

    A literal here-string ends only at a line starting with ``'@``; JSON
    produced by ``json.dumps`` never contains a raw newline, so it cannot
    terminate early.
    """
    return "@'\n" + value + "\n'@"


def build_certificate_script(
    credentials: PowerShellCertificateCredentials, body: str
) -> str:
    """Wrap a script body with certificate sign-in and guaranteed sign-out."""
    return f"""{ANTI_HANG_PREFIX}
Import-Module MicrosoftTeams -ErrorAction Stop

Connect-MicrosoftTeams `
    -ApplicationId {quote(credentials.app_id)} `
    -CertificateThumbprint {quote(credentials.certificate_thumbprint)} `
    -TenantId {quote(credentials.azure_tenant_id)} `
    -ErrorAction Stop | Out-Null

try {{
{body}
    Disconnect-MicrosoftTeams -Confirm:$false -ErrorAction SilentlyContinue
    exit 0
}} catch {{
    Write-Error $_.Exception.Message
    Disconnect-MicrosoftTeams -Confirm:$false -ErrorAction SilentlyContinue
    exit 1
}}
"""


async def run_script(
    script: str, timeout_seconds: float, pwsh_path: str = "pwsh"
) -> ScriptResult:
    """
    Execute a script with PowerShell 7.

    Args:
        script: Complete script text
        timeout_seconds: Wall-clock limit; the process is killed when exceeded
        pwsh_path: PowerShell executable

    Returns:
        ScriptResult with exit code and decoded output

    Raises:
        TeamsScriptTimeoutError: If the script exceeds the limit
        TeamsScriptError: If PowerShell cannot be started
    """
    with tempfile.TemporaryDirectory(prefix="pwsh-") as temp_dir:
        script_path = Path(temp_dir) / "script.ps1"
        script_path.write_text(script, encoding="utf-8")

        try:
            process = await asyncio.create_subprocess_exec(
                pwsh_path,
                *PWSH_ARGS,
                "-File",
                str(script_path),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("Failed to start PowerShell", pwsh_path=pwsh_path, error=str(e))
            raise TeamsScriptError(f"Failed to start PowerShell: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=timeout_seconds
            )
        except TimeoutError:
            process.kill()
            await process.wait()
            logger.warning("PowerShell script timed out", timeout_seconds=timeout_seconds)
            raise TeamsScriptTimeoutError(timeout_seconds) from None
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise

    return ScriptResult(
        exit_code=process.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


def parse_json_output(output: str) -> list[dict[str, Any]]:
    """
    Parse ``ConvertTo-Json`` output into a list of objects.

    ConvertTo-Json emits a bare object for a single item and nothing at all
    for an empty pipeline.

    Raises:
        TeamsResponseError: If the output is not JSON objects
    """
    text = output.strip()
    if not text:
        return []

    # Module banners may precede the payload
    start = min((i for i in (text.find("["), text.find("{")) if i >= 0), default=-1)
    if start < 0:
        raise TeamsResponseError("PowerShell returned no JSON output")

    try:
        data = json.loads(text[start:])
    except json.JSONDecodeError as e:
        raise TeamsResponseError(f"Invalid JSON from PowerShell: {e}") from e

    items = data if isinstance(data, list) else [data]
    if not all(isinstance(item, dict) for item in items):
        raise TeamsResponseError("Unexpected JSON shape from PowerShell")
    return items


def error_message(result: ScriptResult) -> str:
    """Best single-line explanation of a failed script."""
    for stream in (result.stderr, result.stdout):
        lines = [line.strip() for line in stream.splitlines() if line.strip()]
        if lines:
            return lines[-1]
    return f"PowerShell exited with code {result.exit_code}"
