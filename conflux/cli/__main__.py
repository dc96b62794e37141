from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer

from ..core.errors import ConfigurationError, NoAdapterForEnvironment
from ..core.manager import ConfigurationManager
from ..core.paths import iter_hierarchical

app = typer.Typer(help="Conflux CLI")

ENV_OPTION = typer.Option(None, "--env", help="Environment tag; overrides CONFLUX_ENV")
CONFIG_OPTION = typer.Option(None, "--config", help="Path to conflux.yaml")

REDACTED = "***"


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fail(error: ConfigurationError) -> NoReturn:
    typer.echo(f"Error: {error}", err=True)
    code = 2 if isinstance(error, NoAdapterForEnvironment) else 1
    raise typer.Exit(code=code)


def _manager(env: Optional[str], config: Optional[Path]) -> ConfigurationManager:
    """Build a manager from conflux.yaml and load it once."""
    try:
        manager = ConfigurationManager.from_config_file(config, environment=env)
        # One-shot commands never start the background reloader.
        manager.initialize(replace(manager.options, enable_hot_reload=False))
    except ConfigurationError as e:
        _fail(e)
    return manager


def _dump(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, sort_keys=True, default=str))


@app.command()
def show(
    env: Optional[str] = ENV_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    flat: bool = typer.Option(False, "--flat", help="Print dotted keys"),
):
    """Print the merged configuration."""
    with _manager(env, config) as manager:
        data = manager.as_dict()
    if flat:
        data = dict(iter_hierarchical(data))
    _dump(data)


@app.command()
def get(
    key: str,
    env: Optional[str] = ENV_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
):
    """Print one value by dotted key."""
    with _manager(env, config) as manager:
        if not manager.has(key):
            typer.echo(f"Key not found: {key}", err=True)
            raise typer.Exit(code=1)
        _dump(manager.get(key))


@app.command()
def validate(
    env: Optional[str] = ENV_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
):
    """Validate the merged configuration for the environment."""
    with _manager(env, config) as manager:
        result = manager.validate()
    _dump({"valid": result.valid, "errors": result.errors, "warnings": result.warnings})
    if not result.valid:
        raise typer.Exit(code=1)


@app.command()
def status(
    env: Optional[str] = ENV_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
):
    """Print the manager status after one load."""
    with _manager(env, config) as manager:
        _dump(manager.get_status().to_dict())


@app.command()
def sources(
    env: Optional[str] = ENV_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
):
    """List the sources of the environment in precedence order."""
    try:
        manager = ConfigurationManager.from_config_file(config, environment=env)
        declared = manager.sources()
    except ConfigurationError as e:
        _fail(e)
    rows = []
    for s in declared:
        options = dict(s.options)
        if "headers" in options:
            options["headers"] = {k: REDACTED for k in options["headers"]}
        rows.append({"name": s.name, "type": s.type.value, "options": options})
    _dump(rows)


if __name__ == "__main__":
    app()
