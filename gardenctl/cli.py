"""gardenctl CLI implementation."""

import json
from typing import Any, Dict, Optional, Tuple

import click
import yaml

from gardenctl.session import Session
from gardenctl.shared import debug
from gardenctl.shared.base_functions import function_registry
from gardenctl.shared.errors import AmbiguousMatchError, GardenctlError
from gardenctl.shared.functions import initialize_functions
from gardenctl.shared.functions.info import CLUSTER_KINDS, GET_KINDS
from gardenctl.shared.functions.ls import RESOURCES
from gardenctl.shared.target import TargetKind

AMBIGUOUS_EXIT_CODE = 2

KINDS = [kind.value for kind in TargetKind]


def _render(ctx: click.Context, data: Any) -> None:
    if ctx.meta.get("gardenctl.output") == "json":
        click.echo(json.dumps(data, indent=2))
    else:
        click.echo(yaml.safe_dump(data, default_flow_style=False, sort_keys=False), nl=False)


def _echo_candidates(kind: str, candidates) -> None:
    for candidate in candidates:
        if isinstance(candidate, dict):
            click.echo(f"- project: {candidate['project']}")
            click.echo(f"  shoot: {candidate['shoot']}")
        else:
            click.echo(f"- {kind}: {candidate}")


def _run(ctx: click.Context, function_name: str, **kwargs: Any) -> Dict[str, Any]:
    """Invoke a registered function and map its errors to exit codes."""

    function = function_registry.get(function_name)
    if function is None:
        raise click.ClickException(f"Function '{function_name}' not found.")
    try:
        return function(ctx.obj, **kwargs)
    except AmbiguousMatchError as e:
        click.echo(f"Error: {e}", err=True)
        _echo_candidates(e.kind, e.candidates)
        ctx.exit(AMBIGUOUS_EXIT_CODE)
    except (GardenctlError, ValueError) as e:
        raise click.ClickException(str(e)) from e


@click.group(help="gardenctl - Target gardens, projects, seeds, shoots and namespaces.")
@click.option("--debug", "-d", "debug_mode", is_flag=True, help="Enable debug logging.")
@click.option(
    "--output",
    "-o",
    type=click.Choice(["yaml", "json"]),
    default="yaml",
    show_default=True,
    help="Output format for structured results.",
)
@click.pass_context
def cli(ctx: click.Context, debug_mode: bool, output: str) -> None:
    """Root command for the gardenctl CLI."""
    # Initialize functions when CLI starts
    initialize_functions()
    if debug_mode:
        debug.enable()
    ctx.meta["gardenctl.output"] = output
    if ctx.obj is None:
        ctx.obj = Session.from_environment()


@cli.command(help="Target a garden, project, seed, shoot or namespace.")
@click.argument("args", nargs=-1)
@click.option("--garden", "-g", help="Target the given garden.")
@click.option("--project", "-p", help="Target the given project.")
@click.option("--seed", "-s", help="Target the given seed.")
@click.option("--shoot", "-t", help="Target the given shoot.")
@click.option("--namespace", "-n", help="Target the given namespace.")
@click.option("--dashboard-url", "-u", help="Target the shoot shown at a dashboard URL.")
@click.pass_context
def target(
    ctx: click.Context,
    args: Tuple[str, ...],
    garden: Optional[str],
    project: Optional[str],
    seed: Optional[str],
    shoot: Optional[str],
    namespace: Optional[str],
    dashboard_url: Optional[str],
) -> None:
    """Push onto the target stack and print the resulting kubeconfig."""
    kind: Optional[str] = None
    name: Optional[str] = None
    if len(args) > 2:
        raise click.UsageError(
            "command must be in the format: target <project|garden|seed|shoot|namespace> NAME"
        )
    if args and args[0].lower() in KINDS:
        kind = args[0].lower()
        name = args[1] if len(args) > 1 else None
    elif len(args) == 1:
        name = args[0]
    elif args:
        raise click.UsageError(f"unknown target kind '{args[0]}'")

    result = _run(
        ctx,
        "target",
        kind=kind,
        name=name,
        garden=garden,
        project=project,
        seed=seed,
        shoot=shoot,
        namespace=namespace,
        dashboard_url=dashboard_url,
    )

    if "gardenClusters" in result:
        _render(ctx, {"gardenClusters": result["gardenClusters"]})
        return

    for step in result["targeted"]:
        click.echo(f"{step['kind'].capitalize()}:")
        if step.get("message"):
            click.echo(step["message"])
        elif step.get("kubeconfig"):
            click.echo(f"KUBECONFIG={step['kubeconfig']}")
    for warning in result["warnings"]:
        click.echo(f"Warning: {warning}", err=True)


@cli.command(help="Drop the current target, or a kind and everything below it.")
@click.argument("kind", required=False, type=click.Choice(KINDS, case_sensitive=False))
@click.pass_context
def drop(ctx: click.Context, kind: Optional[str]) -> None:
    """Pop from the target stack."""
    result = _run(ctx, "drop", kind=kind.lower() if kind else None)
    for entry in result["dropped"]:
        click.echo(f"Dropped {entry['kind']} {entry['name']}")
    for warning in result["warnings"]:
        click.echo(f"Warning: {warning}", err=True)


@cli.command(help="List gardens, projects, seeds or shoots.")
@click.argument("resource", type=click.Choice(RESOURCES))
@click.pass_context
def ls(ctx: click.Context, resource: str) -> None:
    """List objects visible from the current target."""
    _render(ctx, _run(ctx, "ls", resource=resource))


@cli.group(help="Show a garden, project, seed, shoot or the target stack.")
def get() -> None:
    """Read-only views."""


@get.command("target", help="Show the current target stack.")
@click.pass_context
def get_target(ctx: click.Context) -> None:
    """Print the stored target stack."""
    _render(ctx, _run(ctx, "get_target"))


def _get_command(kind: str) -> click.Command:
    @click.argument("name", required=False)
    @click.pass_context
    def command(ctx: click.Context, name: Optional[str]) -> None:
        _render(ctx, _run(ctx, "get", kind=kind, name=name))

    return click.command(kind, help=GET_HELP[kind])(command)


GET_HELP = {
    "garden": "Show the kubeconfig of garden NAME or of the targeted garden.",
    "project": "Show project NAME or the targeted project.",
    "seed": "Show the kubeconfig of seed NAME, the targeted seed or the seed of the targeted shoot.",
    "shoot": "Show shoot NAME or the targeted shoot.",
}

for _kind in GET_KINDS:
    get.add_command(_get_command(_kind))


@cli.command(help="Show the kubeconfig of the current target.")
@click.option("--kind", "-k", type=click.Choice(CLUSTER_KINDS), help="Cluster to show.")
@click.pass_context
def kubeconfig(ctx: click.Context, kind: Optional[str]) -> None:
    """Print the kubeconfig path and a summary of its contexts."""
    _render(ctx, _run(ctx, "kubeconfig", kind=kind))


@cli.command(help="List recent targets or switch back to entry INDEX.")
@click.argument("index", type=int, required=False)
@click.option("--limit", "-l", type=int, default=20, show_default=True)
@click.pass_context
def history(ctx: click.Context, index: Optional[int], limit: int) -> None:
    """Show the targeting history."""
    result = _run(ctx, "history", index=index, limit=limit)
    if index is None:
        if not result["history"]:
            click.echo("No Target History results")
            return
        for item in result["history"]:
            click.echo(f"{item['index']}) {item.get('cmd', '')}")
        return

    for cluster in result["kubeconfigs"]:
        click.echo(f"{cluster['kind'].capitalize()}:")
        click.echo(f"KUBECONFIG={cluster['kubeconfig']}")


# kubectl sees every argument, --help included.
KUBECTL_SETTINGS = {"ignore_unknown_options": True, "help_option_names": []}


def _kubectl(ctx: click.Context, args: Tuple[str, ...], **kwargs: Any) -> None:
    result = _run(ctx, "kubectl", args=list(args), **kwargs)
    click.echo(result["stdout"], nl=False)
    if result["stderr"]:
        click.echo(result["stderr"], err=True, nl=False)
    ctx.exit(result["returncode"])


@cli.command(context_settings=KUBECTL_SETTINGS, help="Run kubectl against the current target.")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def kubectl(ctx: click.Context, args: Tuple[str, ...]) -> None:
    _kubectl(ctx, args)


cli.add_command(kubectl, "k")


@cli.command(context_settings=KUBECTL_SETTINGS, help="Run kubectl across all namespaces.")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def ka(ctx: click.Context, args: Tuple[str, ...]) -> None:
    _kubectl(ctx, args, all_namespaces=True)


@cli.command(context_settings=KUBECTL_SETTINGS, help="Run kubectl in namespace kube-system.")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def ks(ctx: click.Context, args: Tuple[str, ...]) -> None:
    _kubectl(ctx, args, namespace="kube-system")


@cli.command(context_settings=KUBECTL_SETTINGS, help="Run kubectl in namespace garden.")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def kg(ctx: click.Context, args: Tuple[str, ...]) -> None:
    _kubectl(ctx, args, namespace="garden")


@cli.command(
    context_settings=KUBECTL_SETTINGS, help="Run kubectl in the namespace given as first argument."
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def kn(ctx: click.Context, args: Tuple[str, ...]) -> None:
    if not args:
        raise click.UsageError("command must be in the format: kn NAMESPACE [ARGS]...")
    _kubectl(ctx, args[1:], namespace=args[0])


def main():
    """Main entry point for CLI."""
    debug.configure_root()
    cli()


if __name__ == "__main__":
    main()
