"""Main CLI entry point for pocketmcp."""

import importlib
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from pocketmcp.core.config import PocketMcpConfig, get_config
from pocketmcp.core.lib_logger import get_component_logger, setup_logging
from pocketmcp.logic.mcp.core.server import McpServer
from pocketmcp.version import __version__

console = Console()


def load_server(app_spec: str, config: PocketMcpConfig) -> McpServer:
    """
    Resolve a ``module:attribute`` reference to an McpServer.

    The attribute may be a server instance or a factory called with the
    configuration.
    """
    module_name, _, attribute = app_spec.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.ClickException(f"Cannot import '{module_name}': {e}")

    target = getattr(module, attribute, None)
    if target is None:
        raise click.ClickException(f"'{module_name}' has no attribute '{attribute}'")

    server = target if isinstance(target, McpServer) else target(config)
    if not isinstance(server, McpServer):
        raise click.ClickException(f"'{app_spec}' did not produce an McpServer")
    return server


@click.group()
@click.version_option(__version__, "--version", "-v", help="Show version and exit")
@click.option("--debug", is_flag=True, help="Enable debug output")
@click.pass_context
def main(ctx: click.Context, debug: bool):
    """pocketmcp - lightweight Model Context Protocol server.

    \b
    QUICK START:
      pocketmcp serve                      # Serve the Bitcoin price server
      pocketmcp serve --port 9000          # Custom port
      pocketmcp inspect                    # Show what the server registers

    \b
    CONFIGURATION:
      Settings are read from POCKETMCP_* environment variables and .env.
    """
    ctx.ensure_object(dict)
    config = get_config()
    if debug:
        config.debug = True
        config.log_level = "DEBUG"
    ctx.obj["config"] = config
    setup_logging(config)


@main.command(name="serve")
@click.option("--host", default=None, help="Server bind address")
@click.option("--port", default=None, type=int, help="Server port")
@click.option("--app", "app_spec", default=None, help="Server factory as module:attribute")
@click.option("--debug", is_flag=True, help="Enable debug logging and uvicorn reload output")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int],
          app_spec: Optional[str], debug: bool):
    """Start the MCP server over HTTP.

    \b
    ENDPOINTS:
      POST /  or /mcp          JSON-RPC messages
      GET  /tools/list         Tools listing
      GET  /health             Health check
    """
    import uvicorn

    config: PocketMcpConfig = ctx.obj["config"]
    try:
        if host is not None:
            config.host = host
        if port is not None:
            config.port = port
        if app_spec is not None:
            config.app = app_spec
        if debug:
            config.debug = True
            config.log_level = "DEBUG"
    except ValueError as e:
        console.print(f"[red]✗[/red] Invalid configuration: {e}")
        raise click.ClickException(str(e))

    logger = get_component_logger("cli")
    server = load_server(config.app, config)

    console.print(f"[green]✓[/green] {server.server_info.name} v{server.server_info.version}")
    console.print(f"  Listening on {config.url}")
    logger.info("Starting server", extra={"host": config.host, "port": config.port, "app": config.app})

    uvicorn.run(
        server.app,
        host=config.host,
        port=config.port,
        log_level="debug" if config.debug else "info",
    )


@main.command(name="inspect")
@click.option("--app", "app_spec", default=None, help="Server factory as module:attribute")
@click.pass_context
def inspect_server(ctx: click.Context, app_spec: Optional[str]):
    """Show the capabilities registered by a server."""
    config: PocketMcpConfig = ctx.obj["config"]
    server = load_server(app_spec or config.app, config)
    handler = server.handler

    console.print(f"[bold]{server.server_info.name}[/bold] v{server.server_info.version}")
    console.print(f"Capabilities: {', '.join(server.capabilities.to_wire()) or 'none'}")

    tools = Table(title="Tools", show_header=True, header_style="bold magenta")
    tools.add_column("Name", style="cyan")
    tools.add_column("Description")
    for tool in handler.tools.list():
        tools.add_row(tool.name, tool.description)
    console.print(tools)

    resources = Table(title="Resources", show_header=True, header_style="bold magenta")
    resources.add_column("URI", style="cyan")
    resources.add_column("Name")
    resources.add_column("MIME type", style="dim")
    for resource in handler.resources.list():
        resources.add_row(resource.uri, resource.name, resource.mime_type or "")
    for template in handler.resource_templates.list():
        resources.add_row(template.uri_template, template.name, template.mime_type or "")
    console.print(resources)

    prompts = Table(title="Prompts", show_header=True, header_style="bold magenta")
    prompts.add_column("Name", style="cyan")
    prompts.add_column("Arguments")
    for prompt in handler.prompts.list():
        arguments = ", ".join(
            f"{arg.name}*" if arg.required else arg.name for arg in prompt.arguments or []
        )
        prompts.add_row(prompt.name, arguments)
    console.print(prompts)


@main.command(name="version")
def version():
    """Show version information."""
    console.print(f"pocketmcp {__version__}")


# CLI alias
cli = main

if __name__ == "__main__":
    main()
