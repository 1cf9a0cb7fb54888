# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from stepper.errors import DocumentError
from stepper.loader import load_document
from stepper.runner import run_document
from stepper.ui.console import Console, get_console, set_console


DEFAULT_DOCUMENTS = ("stepper.yaml", "stepper.yml")


def find_document_files() -> list[Path]:
    """
    Find step documents in the current directory.

    Returns:
        List of Path objects for stepper.yaml / stepper.yml, whichever exist
    """
    current_dir = Path(".")
    return [current_dir / name for name in DEFAULT_DOCUMENTS if (current_dir / name).exists()]


def discover_document(document_arg: str | None) -> Path:
    """
    Resolve the document path from the argument or the default names.

    Raises:
        SystemExit: If no document can be found or the default is ambiguous
    """
    console = get_console()

    if document_arg:
        document_path = Path(document_arg)
        if not document_path.exists():
            console.print_error(
                "Document not found",
                f"Could not find step document: {document_arg}",
                suggestion="Check the path or run from the directory containing stepper.yaml",
            )
            sys.exit(1)
        return document_path

    found = find_document_files()

    if len(found) == 0:
        console.print_error(
            "No document found",
            "Could not find a step document.",
            details=["Looked for:"] + [f"  {name}" for name in DEFAULT_DOCUMENTS],
            suggestion="Pass the document explicitly:\n  stepper run path/to/steps.yaml",
        )
        sys.exit(1)

    if len(found) > 1:
        console.print_error(
            "Multiple documents found",
            "Found more than one default document. Please specify which one to use:",
            details=[f"  {p}" for p in found],
            suggestion="  stepper run stepper.yaml",
        )
        sys.exit(1)

    return found[0]


def _load_or_exit(path: Path, verbose: bool):
    console = get_console()
    try:
        return load_document(path)
    except DocumentError as e:
        console.print_error(
            "Failed to load document",
            e.message,
            details=[f"source: {e.details.get('source', path)}"],
        )
        if verbose:
            console.print_exception(e)
        sys.exit(1)


@click.group()
@click.option(
    "--verbose",
    is_flag=True,
    default=False,
    envvar="STEPPER_VERBOSE",
    help="Show internal diagnostics and stack traces",
)
@click.version_option(package_name="stepper")
@click.pass_context
def cli(ctx, verbose):
    """stepper: run declarative steps from a YAML document."""
    console = Console(verbose=verbose)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("document", required=False)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    envvar="STEPPER_DRY_RUN",
    help="Render and preview every step without spawning or writing anything",
)
@click.option(
    "--verbose",
    "run_verbose",
    is_flag=True,
    default=False,
    help="Show internal diagnostics (same as the group-level --verbose)",
)
@click.pass_context
def run(ctx, document, dry_run, run_verbose):
    """Run every step of DOCUMENT in order, stopping at the first failure."""
    verbose = ctx.obj.get("verbose", False) or run_verbose
    if verbose and not get_console().verbose:
        set_console(Console(verbose=True))
    console = get_console()

    document_path = discover_document(document)
    doc = _load_or_exit(document_path, verbose)

    try:
        console.print_run_started(
            document=document_path.name,
            step_count=len(doc.steps),
            dry_run=dry_run,
        )

        result = run_document(doc, dry_run=dry_run, verbose=verbose, console=console)

        failed = result.failed
        console.print_results(
            total=result.total,
            ran=result.count("ok"),
            skipped=result.count("skipped"),
            failed=failed.index if failed is not None else None,
        )
        sys.exit(result.exit_code)

    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)


@cli.command()
@click.argument("document", required=False)
@click.pass_context
def validate(ctx, document):
    """Check that every step of DOCUMENT has exactly one operation."""
    console = get_console()

    document_path = discover_document(document)
    doc = _load_or_exit(document_path, ctx.obj.get("verbose", False))

    problems = 0
    for index, step in enumerate(doc.steps):
        found = step.populated()
        if len(found) == 1:
            kind = found[0][0]
            console.print_info(f"[{index + 1}] {kind:<5} {step.title(kind)}")
            continue
        problems += 1
        kinds = ", ".join(k for k, _ in found) or "none"
        console.print_error(
            f"Step {index + 1} is invalid",
            "expected exactly one of: shell, exec, ssh, conf",
            details=[f"found: {kinds}"],
        )

    if problems:
        sys.exit(1)
    console.print_info(f"OK: {len(doc.steps)} step(s)")


if __name__ == "__main__":
    cli()
