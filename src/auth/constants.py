from enum import Enum


class Role(str, Enum):
    """Operator roles."""

    ADMIN = "admin"
    OPERATOR = "operator"


class CookieNames(str, Enum):
    """Cookie names used in the authentication system."""

    SESSION_TOKEN = "session_token"


class TimeInSeconds(int):
    """Time constants in seconds."""

    ONE_HOUR = 3600


class OAuthEndpoints(str, Enum):
    """AWS Cognito endpoint constants."""

    USERINFO_ENDPOINT = "/oauth2/userInfo"
