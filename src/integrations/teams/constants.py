"""
Microsoft Teams integration constants and enums.

Policy types map to the MicrosoftTeams module cmdlets used to list and
grant them.
"""

from enum import Enum
from typing import NamedTuple


class TeamsProvider(str, Enum):
    """Available Teams directory providers."""

    POWERSHELL = "powershell"
    MOCK = "mock"


class PolicyType(str, Enum):
    VOICE_ROUTING = "voiceRouting"
    AUDIO_CONFERENCING = "audioConferencing"
    CALL_HOLD = "callHold"
    CALLER_ID = "callerId"
    CALLING = "calling"
    EMERGENCY_CALL_ROUTING = "emergencyCallRouting"
    EMERGENCY_CALLING = "emergencyCalling"
    MEETING = "meeting"
    VOICE_APPLICATIONS = "voiceApplications"
    VOICEMAIL = "voicemail"


class PolicyTypeConfig(NamedTuple):
    display_name: str
    get_cmdlet: str
    grant_cmdlet: str
    user_property: str
    supports_description: bool


POLICY_TYPES: dict[PolicyType, PolicyTypeConfig] = {
    PolicyType.VOICE_ROUTING: PolicyTypeConfig(
        "Voice Routing Policy",
        "Get-CsOnlineVoiceRoutingPolicy",
        "Grant-CsOnlineVoiceRoutingPolicy",
        "OnlineVoiceRoutingPolicy",
        True,
    ),
    PolicyType.AUDIO_CONFERENCING: PolicyTypeConfig(
        "Audio Conferencing Policy",
        "Get-CsTeamsAudioConferencingPolicy",
        "Grant-CsTeamsAudioConferencingPolicy",
        "TeamsAudioConferencingPolicy",
        True,
    ),
    PolicyType.CALL_HOLD: PolicyTypeConfig(
        "Call Hold Policy",
        "Get-CsTeamsCallHoldPolicy",
        "Grant-CsTeamsCallHoldPolicy",
        "TeamsCallHoldPolicy",
        False,
    ),
    PolicyType.CALLER_ID: PolicyTypeConfig(
        "Caller ID Policy",
        "Get-CsCallingLineIdentity",
        "Grant-CsCallingLineIdentity",
        "CallingLineIdentity",
        True,
    ),
    PolicyType.CALLING: PolicyTypeConfig(
        "Calling Policy",
        "Get-CsTeamsCallingPolicy",
        "Grant-CsTeamsCallingPolicy",
        "TeamsCallingPolicy",
        True,
    ),
    PolicyType.EMERGENCY_CALL_ROUTING: PolicyTypeConfig(
        "Emergency Call Routing Policy",
        "Get-CsTeamsEmergencyCallRoutingPolicy",
        "Grant-CsTeamsEmergencyCallRoutingPolicy",
        "TeamsEmergencyCallRoutingPolicy",
        True,
    ),
    PolicyType.EMERGENCY_CALLING: PolicyTypeConfig(
        "Emergency Calling Policy",
        "Get-CsTeamsEmergencyCallingPolicy",
        "Grant-CsTeamsEmergencyCallingPolicy",
        "TeamsEmergencyCallingPolicy",
        True,
    ),
    PolicyType.MEETING: PolicyTypeConfig(
        "Meeting Policy",
        "Get-CsTeamsMeetingPolicy",
        "Grant-CsTeamsMeetingPolicy",
        "TeamsMeetingPolicy",
        True,
    ),
    PolicyType.VOICE_APPLICATIONS: PolicyTypeConfig(
        "Voice Applications Policy",
        "Get-CsTeamsVoiceApplicationsPolicy",
        "Grant-CsTeamsVoiceApplicationsPolicy",
        "TeamsVoiceApplicationsPolicy",
        False,
    ),
    PolicyType.VOICEMAIL: PolicyTypeConfig(
        "Voicemail Policy",
        "Get-CsOnlineVoicemailPolicy",
        "Grant-CsOnlineVoicemailPolicy",
        "OnlineVoicemailPolicy",
        True,
    ),
}

PWSH_ARGS = ("-NoProfile", "-NonInteractive", "-NoLogo", "-ExecutionPolicy", "Bypass")

# Policies returned as "Tag:Name" identities; the global default has no tag
POLICY_TAG_PREFIX = "Tag:"
