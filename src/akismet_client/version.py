"""
Version information for the Akismet client library.
"""

VERSION = "0.1.0"

# Name sent in the User-Agent header when the caller does not supply one
USER_AGENT_NAME = "akismet-client"


def default_user_agent():
    """Format the default User-Agent value ("name/version")."""
    return f"{USER_AGENT_NAME}/{VERSION}"
