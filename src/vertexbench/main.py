import argparse
import json
import logging
import os
import sys
from importlib.metadata import version

from rich.console import Console
from rich.table import Table

from .core import DEFAULT_TIMEOUT, DEFAULT_WAIT_TIMEOUT
from .errors import VertexBenchError
from .lifecycle import NotebookLifecycle
from .logger import logger, setup_logger
from .naming import instance_id_from_name, parse_instance_name
from .operations import wait_for_operation
from .schemas.config import ClientConfig
from .templates import build_template

PROJECT_ENV = "VERTEXBENCH_PROJECT_ID"
LOCATION_ENV = "VERTEXBENCH_LOCATION"
CREDENTIALS_ENV = "GOOGLE_APPLICATION_CREDENTIALS"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vertexbench",
        description="vertexbench: Vertex AI Workbench instance lifecycle tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List instances in a zone
  vertexbench --project-id my-project --location us-central1-a list

  # Create an instance and wait for provisioning to finish
  vertexbench --project-id my-project --location us-central1-a create nb-1 --wait

  # Print the JupyterLab URL
  vertexbench --project-id my-project --location us-central1-a url nb-1
""",
    )
    try:
        ver = version("vertexbench")
    except Exception:
        ver = "unknown"
    parser.add_argument("--version", action="version", version=f"vertexbench v{ver}")

    parser.add_argument(
        "--project-id",
        default=os.environ.get(PROJECT_ENV),
        help=f"GCP Project ID (default: ${PROJECT_ENV})",
    )
    parser.add_argument(
        "--location",
        default=os.environ.get(LOCATION_ENV),
        help=f"Zone holding the instances, e.g. us-central1-a (default: ${LOCATION_ENV})",
    )
    parser.add_argument(
        "--credentials",
        default=os.environ.get(CREDENTIALS_ENV),
        help=(
            "Service account key file; other credential file types are rejected "
            f"(default: ${CREDENTIALS_ENV}, else application default credentials)"
        ),
    )
    parser.add_argument("--endpoint", help="Override the Notebooks API endpoint")
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Deadline for each API call in seconds (default: {DEFAULT_TIMEOUT:.0f})",
    )
    parser.add_argument("--json", action="store_true", help="Output results as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("list", help="List instances")

    create = sub.add_parser("create", help="Create an instance")
    create.add_argument("instance_id", help="Instance id or full resource name")
    create.add_argument("--machine-type", help="Override the machine type")
    create.add_argument("--image-tag", help="Override the container image tag")
    create.add_argument(
        "--wait", action="store_true", help="Wait for provisioning to finish"
    )

    for name, help_text in (
        ("url", "Print the JupyterLab access URL"),
        ("describe", "Show instance details"),
        ("start", "Start a stopped instance"),
        ("stop", "Stop a running instance"),
        ("delete", "Delete an instance"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("instance_id", help="Instance id or full resource name")
        if name in ("start", "stop", "delete"):
            cmd.add_argument(
                "--wait", action="store_true", help="Wait for the operation to finish"
            )

    wait = sub.add_parser("wait", help="Wait for a long-running operation")
    wait.add_argument("operation")
    wait.add_argument(
        "--wait-timeout",
        type=float,
        default=DEFAULT_WAIT_TIMEOUT,
        help=f"Give up after this many seconds (default: {DEFAULT_WAIT_TIMEOUT:.0f})",
    )

    return parser


def _emit(out_console: Console, args: argparse.Namespace, payload: object) -> None:
    if args.json:
        print(json.dumps(payload, indent=2, default=str))
    elif isinstance(payload, str):
        out_console.print(payload, markup=False, highlight=False)
    else:
        out_console.print(payload)


def run(args: argparse.Namespace, log_console: Console, out_console: Console) -> None:
    config = ClientConfig(
        credentials_path=args.credentials,
        api_endpoint=args.endpoint,
        timeout=args.timeout,
    )
    lifecycle = NotebookLifecycle(config)
    project, location = args.project_id, args.location

    if args.command == "list":
        names = lifecycle.list_instances(project, location)
        if args.json:
            _emit(out_console, args, names)
            return
        table = Table(title=f"Workbench Instances in {location} ({len(names)})")
        table.add_column("Instance", style="cyan")
        table.add_column("Resource Name")
        for name in names:
            table.add_row(instance_id_from_name(name), name)
        out_console.print(table)
        return

    if args.command == "url":
        url = lifecycle.get_access_url(project, location, args.instance_id)
        _emit(out_console, args, url)
        return

    if args.command == "describe":
        details = lifecycle.describe_instance(project, location, args.instance_id)
        _emit(out_console, args, details.model_dump(mode="json"))
        return

    if args.command == "wait":
        operation = args.operation
        wait_timeout = args.wait_timeout
    else:
        if args.command == "create":
            overrides = {}
            if args.machine_type:
                overrides["machine_type"] = args.machine_type
            if args.image_tag:
                overrides["image_tag"] = args.image_tag
            operation = lifecycle.create_instance(
                project, location, args.instance_id, build_template(**overrides)
            )
        else:
            submit = getattr(lifecycle, f"{args.command}_instance")
            operation = submit(project, location, args.instance_id)
        _emit(out_console, args, operation)
        if not args.wait:
            return
        wait_timeout = DEFAULT_WAIT_TIMEOUT

    log_console.print(f"Waiting for [bold]{operation}[/bold]...")
    status = wait_for_operation(project, location, operation, config, timeout=wait_timeout)
    if not status.succeeded:
        raise VertexBenchError(f"Operation {operation} failed: {status.error_message}")
    log_console.print("[green]Operation completed.[/green]")


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    # A full resource name carries its own project and location
    instance_arg = getattr(args, "instance_id", None)
    if instance_arg and instance_arg.startswith("projects/"):
        try:
            args.project_id, args.location, args.instance_id = parse_instance_name(
                instance_arg
            )
        except ValueError as e:
            parser.error(str(e))

    if not args.project_id or not args.location:
        parser.error(
            f"--project-id and --location are required (or set {PROJECT_ENV} "
            f"and {LOCATION_ENV})"
        )

    if args.verbose:
        setup_logger(level=logging.INFO)

    # Use stderr for logs/progress if stdout is piped for JSON
    log_console = Console(stderr=True, quiet=args.json)
    out_console = Console()

    try:
        run(args, log_console, out_console)
    except VertexBenchError as e:
        logger.error(f"{args.command.capitalize()} Failed: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        log_console.print("\n[bold red]Operation cancelled by user.[/bold red]")
        sys.exit(130)


if __name__ == "__main__":
    main()
