# mcp_promptgate/servers/errors.py
from typing import Optional


class ServerConfigurationError(Exception):
    """The external server definitions are missing, malformed, or reference an unknown server."""

    def __init__(self, message: str, server_name: Optional[str] = None):
        self.message = message
        self.server_name = server_name
        super().__init__(message)
