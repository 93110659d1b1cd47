# mcp_promptgate/oauth/discovery.py
import logging
import re
from typing import Optional, List, Dict, Any
from urllib.parse import urlsplit

import httpx
from pydantic import ValidationError

from .errors import DiscoveryError
from .models import AuthorizationServerMetadata, ProtectedResourceMetadata

logger = logging.getLogger(__name__)

OAUTH_AUTHORIZATION_SERVER_PATH = "/.well-known/oauth-authorization-server"
OPENID_CONFIGURATION_PATH = "/.well-known/openid-configuration"

# `resource` must be a standalone auth-param, not the tail of `resource_metadata`
_RESOURCE_PARAM = re.compile(r'(?:^|[\s,])resource="([^"]+)"')
_RESOURCE_METADATA_PARAM = re.compile(r'(?:^|[\s,])resource_metadata="([^"]+)"')


def parse_www_authenticate_resource(header_value: Optional[str]) -> Optional[str]:
    """
    Extracts the metadata location advertised in a WWW-Authenticate challenge.

    The `resource` parameter is preferred; `resource_metadata` (RFC 9728) is
    accepted when `resource` is absent.
    """
    if not header_value:
        return None
    for pattern in (_RESOURCE_PARAM, _RESOURCE_METADATA_PARAM):
        match = pattern.search(header_value)
        if match:
            return match.group(1)
    return None


def _origin(url: str) -> str:
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        raise DiscoveryError(f"Cannot derive an origin from resource URL '{url}'.", resource_url=url)
    return f"{parts.scheme}://{parts.netloc}"


class DiscoveryResolver:
    """
    Locates the OAuth metadata document for a protected resource.

    Steps, first success wins:
      1. `WWW-Authenticate` resource hint from an unauthenticated GET.
      2. `/.well-known/oauth-authorization-server` on the resource origin.
      3. `/.well-known/openid-configuration` on the resource origin.

    Failures of individual steps are logged and skipped. Only running out of
    steps raises DiscoveryError.
    """

    def __init__(self, http_client: httpx.AsyncClient):
        self.http_client = http_client

    async def resolve_metadata_url(self, resource_url: str) -> str:
        logger.info(f"DISCOVERY: Resolving OAuth metadata for resource '{resource_url}'.")

        hinted_url = await self._probe_www_authenticate(resource_url)
        if hinted_url:
            logger.info(f"DISCOVERY: Using WWW-Authenticate resource hint '{hinted_url}'.")
            return hinted_url

        origin = _origin(resource_url)
        for well_known_path in (OAUTH_AUTHORIZATION_SERVER_PATH, OPENID_CONFIGURATION_PATH):
            candidate_url = f"{origin}{well_known_path}"
            if await self._probe_well_known(candidate_url):
                logger.info(f"DISCOVERY: Using well-known metadata '{candidate_url}'.")
                return candidate_url

        logger.error(f"DISCOVERY: All discovery steps failed for resource '{resource_url}'.")
        raise DiscoveryError(
            f"Could not discover OAuth metadata for '{resource_url}': no WWW-Authenticate resource hint, "
            f"and neither {OAUTH_AUTHORIZATION_SERVER_PATH} nor {OPENID_CONFIGURATION_PATH} responded successfully.",
            resource_url=resource_url
        )

    async def _probe_www_authenticate(self, resource_url: str) -> Optional[str]:
        try:
            response = await self.http_client.get(resource_url)
        except httpx.HTTPError as e:
            logger.warning(f"DISCOVERY: Unauthenticated probe of '{resource_url}' failed: {e!r}")
            return None

        header_value = response.headers.get("www-authenticate")
        if not header_value:
            logger.debug(f"DISCOVERY: No WWW-Authenticate header from '{resource_url}' (status {response.status_code}).")
            return None

        hinted_url = parse_www_authenticate_resource(header_value)
        if not hinted_url:
            logger.info(f"DISCOVERY: WWW-Authenticate header from '{resource_url}' has no resource parameter.")
        return hinted_url

    async def _probe_well_known(self, candidate_url: str) -> bool:
        try:
            response = await self.http_client.get(candidate_url, headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            logger.warning(f"DISCOVERY: Probe of '{candidate_url}' failed: {e!r}")
            return False
        if not response.is_success:
            logger.debug(f"DISCOVERY: Probe of '{candidate_url}' returned {response.status_code}.")
            return False
        return True

    async def fetch_authorization_server_metadata(self, metadata_url: str) -> AuthorizationServerMetadata:
        """
        Loads an authorization server metadata document.

        If the document is protected resource metadata (RFC 9728), the first
        listed authorization server is resolved through its own well-known
        documents.
        """
        document = await self._fetch_json(metadata_url)
        if document is None:
            raise DiscoveryError(f"Metadata document at '{metadata_url}' could not be loaded.", resource_url=metadata_url)

        if "authorization_endpoint" not in document and document.get("authorization_servers"):
            resource_metadata = ProtectedResourceMetadata.model_validate(document)
            issuer = resource_metadata.authorization_servers[0]
            logger.info(f"DISCOVERY: '{metadata_url}' is protected resource metadata. Following authorization server '{issuer}'.")
            document = await self._fetch_issuer_metadata(issuer)
            if document is None:
                raise DiscoveryError(
                    f"No metadata document found for authorization server '{issuer}'.",
                    resource_url=metadata_url
                )

        try:
            return AuthorizationServerMetadata.model_validate(document)
        except ValidationError as e:
            raise DiscoveryError(
                f"Metadata document at '{metadata_url}' is missing required endpoints: {e.error_count()} validation error(s).",
                resource_url=metadata_url
            ) from e

    async def _fetch_issuer_metadata(self, issuer: str) -> Optional[Dict[str, Any]]:
        for candidate_url in self._issuer_metadata_urls(issuer):
            document = await self._fetch_json(candidate_url)
            if document is not None:
                return document
        return None

    @staticmethod
    def _issuer_metadata_urls(issuer: str) -> List[str]:
        """Well-known locations for an issuer, path-inserted form first (RFC 8414 - Section 3)."""
        origin = _origin(issuer)
        path = urlsplit(issuer).path.rstrip("/")
        candidates = []
        if path:
            candidates.append(f"{origin}{OAUTH_AUTHORIZATION_SERVER_PATH}{path}")
        candidates.append(f"{origin}{OAUTH_AUTHORIZATION_SERVER_PATH}")
        if path:
            candidates.append(f"{origin}{path}{OPENID_CONFIGURATION_PATH}")
        candidates.append(f"{origin}{OPENID_CONFIGURATION_PATH}")
        return candidates

    async def _fetch_json(self, url: str) -> Optional[Dict[str, Any]]:
        try:
            response = await self.http_client.get(url, headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            logger.warning(f"DISCOVERY: Fetching '{url}' failed: {e!r}")
            return None
        if not response.is_success:
            logger.warning(f"DISCOVERY: Fetching '{url}' returned {response.status_code}.")
            return None
        try:
            document = response.json()
        except ValueError:
            logger.warning(f"DISCOVERY: Response from '{url}' is not JSON.")
            return None
        if not isinstance(document, dict):
            logger.warning(f"DISCOVERY: Response from '{url}' is not a JSON object.")
            return None
        return document
