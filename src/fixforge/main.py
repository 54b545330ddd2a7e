import typer

from fixforge import __version__
from fixforge.logging_config import setup_logging
from fixforge.cli import analyze, apply, config_cmd
from fixforge.cli.config import CLIConfig

app = typer.Typer(help="Analyze source files and safely apply byte-offset fixes.")


# Global CLI callback for flags that apply to all commands
@app.callback()
def global_options(
    human: bool = typer.Option(
        False,
        "--human",
        "-H",
        help="Enable human mode: pretty output with colors (also via FIXFORGE_HUMAN_MODE env var)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr"),
):
    """
    fixforge: find issues, apply their fixes with backups and atomic writes.

    Machine mode is DEFAULT (JSON output, no console logging).
    Use --human/-H for pretty output.
    """
    CLIConfig.set_machine_mode(False if human else None)
    if CLIConfig.is_machine_mode():
        setup_logging(level="DEBUG" if verbose else "INFO", suppress_console=not verbose, force=True)
    else:
        setup_logging(level="DEBUG" if verbose else "INFO", suppress_console=False, force=True)


app.command(name="analyze")(analyze.analyze_cmd)
app.command(name="apply")(apply.apply_cmd)
app.add_typer(config_cmd.app, name="config", help="Show and change settings (config show/get/set)")


@app.command()
def version():
    """
    Prints the current version of fixforge.
    """
    typer.echo(f"fixforge v{__version__}")


if __name__ == "__main__":
    app()
