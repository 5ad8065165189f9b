"""
Main application entry point for MomentX.

Provides the CLI for publishing the coffee NFT package, running the demo
pipeline and querying on-chain state.
"""

import json
import sys
from typing import Any, Optional

import click
from rich.console import Console
from rich.table import Table

from momentx.core.config import get_settings, print_configuration_summary, validate_required_settings
from momentx.core.exceptions import ConfigurationError, MomentXError, WorkflowError
from momentx.core.logging import set_correlation_id, setup_logging
from momentx.workflows.coffee_nft import FLOW_STEPS, CoffeeNFTWorkflow

console = Console()
err_console = Console(stderr=True)


def print_payload(label: str, payload: Any) -> None:
    """Print a labelled JSON payload to stdout."""
    console.print(f"[bold cyan]{label}[/bold cyan]")
    console.print_json(json.dumps(payload, default=str))


def _fail(kind: str, error: Exception) -> None:
    """Report a fatal error with its stack trace on stderr and exit 1."""
    err_console.print(f"[red]{kind}:[/red] {error}")
    if isinstance(error, WorkflowError) and error.completed_steps:
        err_console.print(
            f"[yellow]Steps already applied on chain:[/yellow] {', '.join(error.completed_steps)}"
        )
    err_console.print_exception()
    sys.exit(1)


def _check_settings(workflow: str) -> None:
    missing = validate_required_settings(workflow)
    if missing:
        raise ConfigurationError(
            f"Missing required settings: {', '.join(missing)}", details={"missing": missing}
        )


def _build_workflow(ctx) -> CoffeeNFTWorkflow:
    settings = get_settings()
    if ctx.obj["dry_run"]:
        settings.dry_run = True
    return CoffeeNFTWorkflow(
        settings, correlation_id=ctx.obj["correlation_id"], reporter=print_payload
    )


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--dry-run", is_flag=True, help="Log transactions instead of submitting them")
@click.option("--correlation-id", help="Set correlation ID for run tracing")
@click.option("--json-logs", is_flag=True, help="Emit JSON log lines instead of rich output")
@click.pass_context
def main(ctx, debug: bool, dry_run: bool, correlation_id: Optional[str], json_logs: bool):
    """Publish and exercise the MomentX coffee NFT contract on Sui."""
    ctx.ensure_object(dict)

    setup_logging(debug=debug, rich_output=not json_logs)

    if correlation_id:
        set_correlation_id(correlation_id)

    ctx.obj["debug"] = debug
    ctx.obj["dry_run"] = dry_run
    ctx.obj["correlation_id"] = correlation_id


@main.command()
@click.option(
    "--flow",
    type=click.Choice(sorted(FLOW_STEPS)),
    help="Redemption flow (default: REDEEM_FLOW setting)",
)
@click.option("--skip-faucet", is_flag=True, help="Do not request faucet funds")
@click.pass_context
def run(ctx, flow: Optional[str], skip_faucet: bool):
    """Run the full demo: faucet, publish, interact and query."""
    try:
        _check_settings("run")
        workflow = _build_workflow(ctx)

        console.print("-----start-----")
        for role, address in workflow.identities.addresses().items():
            console.print(f"{role} address: {address}")

        result = workflow.run(flow=flow, skip_faucet=skip_faucet)

        table = Table(title="Coffee NFT Pipeline")
        table.add_column("Step", style="cyan")
        table.add_column("Status", style="white")
        table.add_column("Duration", style="dim")
        for step in result.steps:
            table.add_row(
                step.name,
                str(step.status.value),
                f"{step.duration_seconds:.2f}s" if step.duration_seconds is not None else "N/A",
            )
        console.print(table)
        console.print("-----end-----")

    except ConfigurationError as e:
        _fail("Configuration Error", e)
    except WorkflowError as e:
        _fail("Workflow Error", e)
    except MomentXError as e:
        _fail("Error", e)
    except Exception as e:
        _fail("Unexpected Error", e)


@main.command()
@click.option("--module-path", help="Compiled module file or bytecode_modules directory")
@click.pass_context
def publish(ctx, module_path: Optional[str]):
    """Publish the compiled package and print its identifiers."""
    try:
        _check_settings("publish")
        workflow = _build_workflow(ctx)
        package = workflow.publish_service.publish(module_path)
        print_payload("PublishResult", package.model_dump())
    except ConfigurationError as e:
        _fail("Configuration Error", e)
    except Exception as e:
        _fail("Publish Error", e)


@main.command()
@click.argument("global_object_id")
@click.pass_context
def query(ctx, global_object_id: str):
    """Query merchants and coffee NFTs of an existing deployment."""
    try:
        _check_settings("query")
        workflow = _build_workflow(ctx)
        report = workflow.run_queries(global_object_id)
        console.print(
            f"[green]Fetched {len(report.nft_objects)} NFT(s) over {len(report.pages)} page(s)[/green]"
        )
    except ConfigurationError as e:
        _fail("Configuration Error", e)
    except Exception as e:
        _fail("Query Error", e)


@main.command()
@click.argument("address")
@click.pass_context
def owned(ctx, address: str):
    """List objects owned by ADDRESS."""
    try:
        _check_settings("query")
        workflow = _build_workflow(ctx)
        print_payload("ownedObjects", workflow.client.get_objects_owned_by_address(address))
    except ConfigurationError as e:
        _fail("Configuration Error", e)
    except Exception as e:
        _fail("Query Error", e)


@main.command()
@click.pass_context
def addresses(ctx):
    """Print the admin, merchant and user addresses."""
    try:
        workflow = _build_workflow(ctx)
        table = Table(title="Identities")
        table.add_column("Role", style="cyan")
        table.add_column("Address", style="white")
        for role, address in workflow.identities.addresses().items():
            table.add_row(role, address)
        console.print(table)
    except ConfigurationError as e:
        _fail("Configuration Error", e)


@main.command()
@click.pass_context
def config(ctx):
    """Display current configuration."""
    try:
        console.print("[blue]MomentX Configuration[/blue]")

        missing = validate_required_settings("run")
        if missing:
            console.print("[red]Configuration Issues:[/red]")
            for item in missing:
                console.print(f"  • Missing: {item}")
            console.print()
        else:
            console.print("[green]Configuration Valid[/green]")
            console.print()

        print_configuration_summary()

        sys.exit(0 if not missing else 1)

    except Exception as e:
        console.print(f"[red]Configuration Error:[/red] {e}")
        sys.exit(1)


@main.command()
@click.pass_context
def health(ctx):
    """Check Sui node connectivity."""
    try:
        _check_settings("query")
        workflow = _build_workflow(ctx)
        status = workflow.client.health_check()

        if status.get("status") == "healthy":
            console.print(f"[green]Node is healthy[/green] ({status.get('version')})")
        else:
            console.print(f"[red]Node is unhealthy:[/red] {status.get('error')}")

        sys.exit(0 if status.get("status") == "healthy" else 1)

    except ConfigurationError as e:
        _fail("Configuration Error", e)


if __name__ == "__main__":
    main()
