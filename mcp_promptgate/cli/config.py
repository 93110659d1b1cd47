# mcp_promptgate/cli/config.py
import os
from dotenv import load_dotenv
from pathlib import Path

# This cli/config.py file is at <project>/mcp_promptgate/cli/config.py
project_root = Path(__file__).parent.parent.parent.resolve()

# Load environment variables from .env file, overriding system environment variables
load_dotenv(dotenv_path=project_root / '.env', override=True)

# API configuration for CLI client communication
PROMPTGATE_CLI_API_BASE_URL = os.getenv("PROMPTGATE_CLI_API_BASE_URL", "http://127.0.0.1:3000")

# Static access token protecting the API, when the server has one configured
PROMPTGATE_CLI_ACCESS_TOKEN = os.getenv("ACCESS_TOKEN")

# Timeout for local discovery runs
PROMPTGATE_CLI_HTTP_TIMEOUT = float(os.getenv("PROMPTGATE_CLI_HTTP_TIMEOUT", "30"))
