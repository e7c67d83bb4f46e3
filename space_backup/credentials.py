"""
Bridge from a bearer token to git's username/password credentials.

Git authenticates HTTP remotes with a username and password obtained from
credential helpers. The bridge answers those requests from the bearer token
alone: for each git invocation it builds an environment that clears every
configured helper and installs one that echoes the bridged credentials.
"""

from dataclasses import dataclass

# Space accepts any username alongside a bearer token as password
BEARER_USERNAME = "bearer"

USERNAME_VAR = "SPACE_BACKUP_GIT_USERNAME"
PASSWORD_VAR = "SPACE_BACKUP_GIT_PASSWORD"

CREDENTIAL_HELPER = (
    f'!f() {{ test "$1" = get || exit 0; '
    f'echo "username=${USERNAME_VAR}"; echo "password=${PASSWORD_VAR}"; }}; f'
)


@dataclass(frozen=True)
class GitCredentials:
    """Username/password pair handed to the git transport."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"GitCredentials(username={self.username!r}, password='***')"


class CredentialBridge:
    """Supplies git credentials derived from a single bearer token."""

    def __init__(self, bearer_token: str):
        self._bearer_token = bearer_token

    def __repr__(self) -> str:
        return "CredentialBridge(bearer_token='***')"

    def __call__(self, url: str) -> GitCredentials:
        """Return the credentials to use for the given remote URL."""
        return GitCredentials(username=BEARER_USERNAME, password=self._bearer_token)

    def git_environment(self, url: str) -> dict[str, str]:
        """
        Build the environment for one git operation against url.

        The first config entry resets credential.helper, so helpers from the
        system, global or repository config are never consulted; the second
        installs the bridge helper. Prompts are disabled so a rejected token
        fails the operation instead of blocking on a terminal.
        """
        credentials = self(url)
        return {
            "GIT_CONFIG_COUNT": "2",
            "GIT_CONFIG_KEY_0": "credential.helper",
            "GIT_CONFIG_VALUE_0": "",
            "GIT_CONFIG_KEY_1": "credential.helper",
            "GIT_CONFIG_VALUE_1": CREDENTIAL_HELPER,
            "GIT_TERMINAL_PROMPT": "0",
            "GIT_ASKPASS": "",
            USERNAME_VAR: credentials.username,
            PASSWORD_VAR: credentials.password,
        }
