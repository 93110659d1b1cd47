# mcp_promptgate/authorization/validators.py
import logging
from enum import Enum
from pathlib import Path
from typing import Optional, List, Dict, Mapping, Callable, Awaitable

from pydantic import BaseModel, Field

from ..oauth.storage_interfaces import AbstractTokenStore
from ..servers.models import ExternalServerConfig, SERVER_TYPE_GITHUB_REPO

logger = logging.getLogger(__name__)

GIT_CREDENTIALS_FILENAME = ".git-credentials"
SSH_KEY_FILENAMES = ("id_rsa", "id_ed25519", "id_ecdsa", "id_dsa")
DEFAULT_GITHUB_PROVIDER = "github"


class CredentialValidatorKind(str, Enum):
    """Credential checks available to servers that are not authorized by token."""
    GIT_CREDENTIALS = "git_credentials"
    GITHUB_SESSION = "github_session"


class ValidatorContext:
    """What a validator may consult besides the server definition."""

    def __init__(
        self,
        environ: Mapping[str, str],
        token_store: AbstractTokenStore,
        github_provider_name: str = DEFAULT_GITHUB_PROVIDER,
    ):
        self.environ = environ
        self.token_store = token_store
        self.github_provider_name = github_provider_name


Validator = Callable[[ExternalServerConfig, ValidatorContext], Awaitable[bool]]


class GitCredentialDetails(BaseModel):
    git_home: Optional[str] = None
    has_git_credentials_file: bool = False
    ssh_keys: List[str] = Field(default_factory=list)

    @property
    def has_credentials(self) -> bool:
        return self.has_git_credentials_file or bool(self.ssh_keys)


def resolve_git_home(server_env: Optional[Mapping[str, str]], environ: Mapping[str, str]) -> Optional[Path]:
    """
    First existing directory among the server's own HOME, GIT_HOME_DIR and
    HOME from the process environment.
    """
    candidates = [
        (server_env or {}).get("HOME"),
        environ.get("GIT_HOME_DIR"),
        environ.get("HOME"),
    ]
    for candidate in candidates:
        if candidate and Path(candidate).is_dir():
            return Path(candidate)
    return None


def inspect_git_home(git_home: Path) -> GitCredentialDetails:
    ssh_dir = git_home / ".ssh"
    return GitCredentialDetails(
        git_home=str(git_home),
        has_git_credentials_file=(git_home / GIT_CREDENTIALS_FILENAME).is_file(),
        ssh_keys=[name for name in SSH_KEY_FILENAMES if (ssh_dir / name).exists()],
    )


def get_git_credential_details(
    server_env: Optional[Mapping[str, str]],
    environ: Mapping[str, str],
) -> GitCredentialDetails:
    git_home = resolve_git_home(server_env, environ)
    if git_home is None:
        return GitCredentialDetails()
    return inspect_git_home(git_home)


async def validate_git_credentials(server_config: ExternalServerConfig, context: ValidatorContext) -> bool:
    details = get_git_credential_details(server_config.env, context.environ)
    logger.debug(
        f"VALIDATOR: Git credentials for '{server_config.name}': home={details.git_home}, "
        f"credentials_file={details.has_git_credentials_file}, ssh_keys={details.ssh_keys}"
    )
    return details.has_credentials


def github_provider_for(server_config: ExternalServerConfig, default_provider: str) -> str:
    if server_config.authorization and server_config.authorization.provider:
        return server_config.authorization.provider
    return default_provider


def _uses_github(server_config: ExternalServerConfig, provider_name: str) -> bool:
    if server_config.type == SERVER_TYPE_GITHUB_REPO or server_config.name == provider_name:
        return True
    repository = server_config.repository
    return bool(repository and "github.com" in repository.url.lower())


async def validate_github_session(server_config: ExternalServerConfig, context: ValidatorContext) -> bool:
    """A GitHub-backed server is usable when its provider server holds a valid OAuth token."""
    provider_name = github_provider_for(server_config, context.github_provider_name)
    if not _uses_github(server_config, provider_name):
        return False
    return await context.token_store.is_valid(provider_name)


VALIDATORS_BY_KIND: Dict[CredentialValidatorKind, Validator] = {
    CredentialValidatorKind.GIT_CREDENTIALS: validate_git_credentials,
    CredentialValidatorKind.GITHUB_SESSION: validate_github_session,
}

# Exact server names with a custom credential check
SERVER_VALIDATOR_KINDS: Dict[str, CredentialValidatorKind] = {
    "git-mcp-server": CredentialValidatorKind.GIT_CREDENTIALS,
    "github-repo": CredentialValidatorKind.GITHUB_SESSION,
    "github": CredentialValidatorKind.GITHUB_SESSION,
}


def get_validator_kind(
    server_name: str,
    server_validator_kinds: Optional[Mapping[str, CredentialValidatorKind]] = None,
) -> Optional[CredentialValidatorKind]:
    registry = SERVER_VALIDATOR_KINDS if server_validator_kinds is None else server_validator_kinds
    return registry.get(server_name)
