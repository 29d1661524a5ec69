"""Command line entry point for the cmdchain server."""

from typing import Annotated

import typer
import uvicorn
from pydantic import ValidationError
from rich.console import Console
from structlog import get_logger

from cmdchain import __version__
from cmdchain.api.app import create_app, create_registry
from cmdchain.config.settings import ConfigurationError, Settings
from cmdchain.core.errors import CommandChainError
from cmdchain.core.logging import setup_logging
from cmdchain.driver.base import BaseDriver
from cmdchain.plugins.base import BasePlugin
from cmdchain.utils.imports import import_string


app = typer.Typer(
    rich_markup_mode="rich",
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)

console = Console()
logger = get_logger(__name__)


def parse_plugin_specs(specs: list[str]) -> dict[str, type[BasePlugin]]:
    """Turn ``name=module:Class`` specs into an ordered name -> class mapping."""
    plugins: dict[str, type[BasePlugin]] = {}
    for spec in specs:
        name, sep, target = spec.partition("=")
        if not sep or not name.strip() or not target.strip():
            raise typer.BadParameter(
                f"Expected name=module:Class, got {spec!r}", param_hint="--plugin"
            )
        name = name.strip()
        if name in plugins:
            raise typer.BadParameter(
                f"Plugin {name} given twice", param_hint="--plugin"
            )
        try:
            plugins[name] = import_string(target.strip())
        except ImportError as e:
            raise typer.BadParameter(str(e), param_hint="--plugin") from e
    return plugins


def load_driver(target: str, settings: Settings) -> BaseDriver:
    try:
        driver_cls = import_string(target)
    except ImportError as e:
        raise typer.BadParameter(str(e), param_hint="--driver") from e
    if not (isinstance(driver_cls, type) and issubclass(driver_cls, BaseDriver)):
        raise typer.BadParameter(
            f"{target} is not a BaseDriver subclass", param_hint="--driver"
        )
    return driver_cls(new_command_timeout=settings.driver.new_command_timeout)


@app.command()
def serve(
    driver: Annotated[
        str,
        typer.Option("--driver", "-d", help="Driver class as module:Class"),
    ],
    plugin: Annotated[
        list[str] | None,
        typer.Option(
            "--plugin",
            "-p",
            help="Plugin as name=module:Class; repeat in chain order (outermost first)",
        ),
    ] = None,
    plugin_args: Annotated[
        str | None,
        typer.Option(
            "--plugin-args",
            help='JSON object of plugin options, e.g. \'{"name": {"key": 1}}\'',
        ),
    ] = None,
    host: Annotated[
        str | None, typer.Option("--host", help="Host to bind the server to")
    ] = None,
    port: Annotated[
        int | None, typer.Option("--port", help="Port to bind the server to")
    ] = None,
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="Logging level")
    ] = None,
) -> None:
    """Start the automation server with the given driver and plugins."""
    try:
        settings = Settings().with_plugin_args(plugin_args)
    except (ConfigurationError, ValidationError) as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        raise typer.Exit(1) from e

    updates = {}
    if host is not None:
        updates["host"] = host
    if port is not None:
        updates["port"] = port
    if updates:
        settings.server = settings.server.model_copy(update=updates)
    if log_level is not None:
        settings.logging = settings.logging.model_copy(
            update={"level": log_level.upper()}
        )

    setup_logging(
        json_logs=settings.logging.format == "json",
        log_level_name=settings.logging.level,
    )

    plugins = parse_plugin_specs(plugin or [])
    unknown = sorted(set(settings.plugins) - set(plugins))
    if unknown:
        logger.warning("plugin_args_unused", plugins=unknown)

    try:
        registry = create_registry(settings, plugins)
    except CommandChainError as e:
        console.print(f"[bold red]Plugin error:[/bold red] {e}")
        raise typer.Exit(1) from e

    api = create_app(settings, registry, load_driver(driver, settings))
    logger.info(
        "server_starting",
        host=settings.server.host,
        port=settings.server.port,
        plugins=registry.list_plugins(),
    )
    uvicorn.run(
        api,
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
    )


@app.command()
def version() -> None:
    """Print version and exit."""
    console.print(f"cmdchain {__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
