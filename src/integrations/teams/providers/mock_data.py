"""
Demo directory data for the mock Teams provider.

Every tenant starts from the same seed so local development has something to
reconcile against.
"""

from src.integrations.teams.constants import PolicyType
from src.integrations.teams.schemas import TeamsPolicy
from src.workflows.schemas import PhoneNumberRecord

MOCK_DIRECTORY: list[PhoneNumberRecord] = [
    PhoneNumberRecord(
        line_uri="tel:+15555550101",
        display_name="Emily Davis",
        user_principal_name="emily.davis@contoso.example",
        policy="US-National",
    ),
    PhoneNumberRecord(
        line_uri="tel:+15555550102",
        display_name="Marcus Chen",
        user_principal_name="marcus.chen@contoso.example",
        policy="US-National",
    ),
    PhoneNumberRecord(
        line_uri="tel:+15555550103",
        display_name="Priya Raman",
        user_principal_name="priya.raman@contoso.example",
        policy="US-International",
    ),
    PhoneNumberRecord(
        line_uri="tel:+15555550150",
        display_name="Main Auto Attendant",
        user_principal_name="aa-main@contoso.example",
        policy=None,
    ),
]

MOCK_POLICIES: dict[PolicyType, list[TeamsPolicy]] = {
    PolicyType.VOICE_ROUTING: [
        TeamsPolicy(identity="Global", name="Global"),
        TeamsPolicy(
            identity="Tag:US-National",
            name="US-National",
            description="Domestic calling only",
        ),
        TeamsPolicy(
            identity="Tag:US-International",
            name="US-International",
            description="Domestic and international calling",
        ),
    ],
    PolicyType.CALLER_ID: [
        TeamsPolicy(identity="Global", name="Global"),
        TeamsPolicy(
            identity="Tag:Main-Line",
            name="Main-Line",
            description="Present the main office number",
        ),
    ],
    PolicyType.CALL_HOLD: [TeamsPolicy(identity="Global", name="Global")],
}
