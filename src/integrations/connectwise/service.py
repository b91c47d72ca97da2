"""
ConnectWise service: tenant-scoped clients and bulk assignment documentation.
"""

from src.integrations.connectwise.client import ConnectWiseClient
from src.integrations.connectwise.exceptions import ConnectWiseError
from src.integrations.connectwise.schemas import TicketLink, TicketUpdateResult
from src.integrations.creds.service import TenantCredentialsService
from src.utils.logger import logger
from src.workflows.schemas import AssignmentResult


def bulk_assignment_note(results: list[AssignmentResult], operator: str) -> str:
    succeeded = [r for r in results if r.success]
    failed = [r for r in results if not r.success]

    lines = [
        f"Teams voice bulk assignment by {operator}: "
        f"{len(succeeded)} succeeded, {len(failed)} failed."
    ]
    for result in results:
        name = result.user_name or result.user_id
        if result.success:
            lines.append(f"- {name}: assigned")
        else:
            lines.append(f"- {name}: FAILED ({result.error})")
    return "\n".join(lines)


class ConnectWiseService:
    def __init__(self, creds_service: TenantCredentialsService, transport=None):
        """
        Args:
            creds_service: Resolves tenant ConnectWise credentials
            transport: Optional httpx transport passed to clients (for testing)
        """
        self.creds_service = creds_service
        self.transport = transport

    async def client(self, tenant_id: str) -> ConnectWiseClient:
        credentials = await self.creds_service.get_connectwise_credentials(tenant_id)
        return ConnectWiseClient(credentials, transport=self.transport)

    async def document_bulk_assignment(
        self,
        tenant_id: str,
        link: TicketLink,
        results: list[AssignmentResult],
        operator: str,
    ) -> TicketUpdateResult:
        """
        Record a finished bulk assignment on a ticket.

        Adds a note listing every user, a time entry when a member is given,
        and moves the ticket to the tenant's default status when configured.
        Failures are returned in the result; the assignment itself already
        happened and is not affected.
        """
        credentials = await self.creds_service.get_connectwise_credentials(tenant_id)
        outcome = TicketUpdateResult(ticket_id=link.ticket_id)
        note = bulk_assignment_note(results, operator)

        async with ConnectWiseClient(credentials, transport=self.transport) as client:
            try:
                await client.add_note(
                    link.ticket_id,
                    note,
                    internal=True,
                    member_identifier=link.member_identifier,
                )
                outcome.note_added = True

                if link.member_identifier and credentials.default_time_minutes:
                    await client.add_time_entry(
                        link.ticket_id,
                        link.member_identifier,
                        credentials.default_time_minutes / 60,
                        notes="Teams voice bulk assignment",
                    )
                    outcome.time_entry_added = True

                if credentials.auto_update_status and credentials.default_status_id:
                    await client.update_status(
                        link.ticket_id, credentials.default_status_id
                    )
                    outcome.status_updated = True
            except ConnectWiseError as e:
                logger.warning(
                    "Failed to document bulk assignment on ticket",
                    tenant_id=tenant_id,
                    ticket_id=link.ticket_id,
                    error=str(e),
                )
                outcome.error = str(e)

        return outcome
