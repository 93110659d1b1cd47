import logging
import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

logging.basicConfig(level=logging.INFO, format='%(asctime)s RUN_DEV.PY - [%(levelname)s] - %(message)s')
logger = logging.getLogger("run_dev_script")

TRUTHY = ("true", "1", "yes", "on")

if __name__ == "__main__":
    dotenv_path = Path(__file__).parent.resolve() / ".env"
    if dotenv_path.exists():
        load_dotenv(dotenv_path=dotenv_path, override=True)
    logger.info(f"ACCESS_TOKEN: {'********' if os.getenv('ACCESS_TOKEN') else 'None'}, "
                f"MCP_SERVERS: {'SET' if os.getenv('MCP_SERVERS') else 'NOT_SET'}")

    host = os.getenv("DEV_SERVER_HOST", "127.0.0.1")
    port = int(os.getenv("DEV_SERVER_PORT", "3000"))
    reload = os.getenv("DEV_SERVER_RELOAD", os.getenv("DEBUG_MODE", "false")).lower() in TRUTHY

    logger.info(f"Starting PromptGate on {host}:{port} (reload: {reload})")
    uvicorn.run(
        "mcp_promptgate.main:app",
        host=host,
        port=port,
        log_level=os.getenv("DEV_SERVER_LOG_LEVEL", "info").lower(),
        reload=reload,
    )
