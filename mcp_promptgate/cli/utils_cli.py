# mcp_promptgate/cli/utils_cli.py
import requests
import typer
import json
from typing import Optional, Dict, Any, Union, List


def make_api_request(
    method: str,
    endpoint: str,
    json_payload: Optional[Dict[str, Any]] = None,
    params_payload: Optional[Dict[str, Any]] = None,
    expected_status: Union[int, List[int]] = 200,
    expect_json_response: bool = True,
    verbose: bool = True
) -> Any:
    """
    Makes an HTTP API request against the running PromptGate server.

    Sends the configured access token as a Bearer header and exits with code 1
    on connection failures or unexpected status codes.
    """
    # Read at call time so tests and shells can change the configuration
    from . import config

    full_url = f"{config.PROMPTGATE_CLI_API_BASE_URL}{endpoint}"
    headers: Dict[str, str] = {}

    if config.PROMPTGATE_CLI_ACCESS_TOKEN:
        headers["Authorization"] = f"Bearer {config.PROMPTGATE_CLI_ACCESS_TOKEN}"

    if verbose:
        typer.echo(f"CLI: {method.upper()} {full_url}")
        if json_payload:
            typer.echo(f"CLI: JSON Payload: {json.dumps(json_payload, indent=2)}")
        if params_payload:
            typer.echo(f"CLI: Query Params: {params_payload}")
        if headers:
            # Mask the access token in output
            log_headers = headers.copy()
            if "Authorization" in log_headers:
                log_headers["Authorization"] = "Bearer *******"
            typer.echo(f"CLI: Headers: {log_headers}")

    try:
        response = requests.request(
            method,
            full_url,
            json=json_payload,
            params=params_payload,
            headers=headers,
            timeout=30
        )
        if verbose:
            typer.echo(f"CLI: Response Status: {response.status_code}")

        expected_statuses = [expected_status] if isinstance(expected_status, int) else expected_status

        if response.status_code in expected_statuses:
            if not response.content and response.status_code == 204:
                return None
            if expect_json_response:
                try:
                    return response.json()
                except json.JSONDecodeError:
                    typer.secho(
                        f"CLI: Error - Could not decode JSON response. Raw text: {response.text}",
                        fg=typer.colors.RED
                    )
                    raise typer.Exit(code=1)
            return response.text

        err_msg = f"CLI: API Error - Expected status {expected_status}, got {response.status_code}."
        try:
            err_data = response.json()
            err_msg += f" Detail: {err_data.get('detail', response.text)}"
        except (json.JSONDecodeError, AttributeError):
            err_msg += f" Raw response: {response.text}"
        typer.secho(err_msg, fg=typer.colors.RED)
        raise typer.Exit(code=1)

    except requests.exceptions.ConnectionError as e:
        typer.secho(
            f"CLI: Connection Error - Could not connect to API at {full_url}. Is the server running? Error: {e}",
            fg=typer.colors.RED
        )
        raise typer.Exit(code=1)
    except requests.exceptions.RequestException as e:
        typer.secho(f"CLI: Request Error - {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
