# mcp_promptgate/authorization/__init__.py
# Credential authorization for external tool servers

# Tiered decision engine
from .decision import (
    AuthorizationDecisionEngine,
    AuthorizationDetails,
    AuthorizationMethod,
    environment_token_key,
)

# Custom credential validators keyed by an explicit kind
from .validators import (
    CredentialValidatorKind,
    ValidatorContext,
    GitCredentialDetails,
    VALIDATORS_BY_KIND,
    SERVER_VALIDATOR_KINDS,
    get_git_credential_details,
    inspect_git_home,
    get_validator_kind,
    resolve_git_home,
    validate_git_credentials,
    validate_github_session,
)

# Credential connections independent of any server
from .connections import (
    ConnectionKind,
    ConnectionStatus,
    candidate_git_homes,
    is_connection_available,
    get_all_connection_statuses,
)

__all__ = [
    "AuthorizationDecisionEngine",
    "AuthorizationDetails",
    "AuthorizationMethod",
    "environment_token_key",
    "CredentialValidatorKind",
    "ValidatorContext",
    "GitCredentialDetails",
    "VALIDATORS_BY_KIND",
    "SERVER_VALIDATOR_KINDS",
    "get_git_credential_details",
    "inspect_git_home",
    "get_validator_kind",
    "resolve_git_home",
    "validate_git_credentials",
    "validate_github_session",
    "ConnectionKind",
    "ConnectionStatus",
    "candidate_git_homes",
    "is_connection_available",
    "get_all_connection_statuses",
]
