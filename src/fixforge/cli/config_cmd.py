"""
CLI config commands: inspect and change fixforge settings.
"""

import json

import typer

from fixforge.user_config import get_user_config
from .config import CLIConfig
from .output import echo, print_error, print_json

app = typer.Typer()


def _parse_value(raw: str):
    """Interpret JSON literals (true, 80, [".py"]); anything else stays a string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


@app.command("show")
def show_cmd():
    """Print the merged configuration."""
    print_json(get_user_config().get_all(), minified=CLIConfig.is_machine_mode())


@app.command("get")
def get_cmd(key: str = typer.Argument(..., help="Dot-separated key, e.g. apply.backup")):
    """Print one configuration value."""
    value = get_user_config().get(key)
    if value is None:
        print_error("CONFIG_KEY_NOT_FOUND", f"No config value for '{key}'", input_value=key)
        raise typer.Exit(code=1)
    echo(json.dumps(value))


@app.command("set")
def set_cmd(
    key: str = typer.Argument(..., help="Dot-separated key, e.g. apply.mode"),
    value: str = typer.Argument(..., help="Value (JSON literals are parsed)"),
    global_: bool = typer.Option(False, "--global", help="Write ~/.fixforge/config.json instead of the project file"),
):
    """Set a configuration value."""
    config = get_user_config()
    parsed = _parse_value(value)
    saved = config.set_global(key, parsed) if global_ else config.set_local(key, parsed)
    if not saved:
        print_error("CONFIG_WRITE_FAILED", f"Could not save '{key}'", input_value=key)
        raise typer.Exit(code=1)
    echo(f"{key} = {json.dumps(parsed)}")
