"""CLI entry point for did-ledger.

Invoked as::

    did-ledger [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m did_ledger.cli.main

Commands
--------
did validate         Check a DID against the DID grammar
did parse            Decompose a DID URL into its components
document normalize   Decode and normalize a DID document JSON file
identity create      Store a minimal document for a new DID
identity read        Print the document stored for a DID
identity update      Replace the document stored for a DID
identity delete      Remove the document stored for a DID
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from did_ledger.did.document import DIDDocument, RELATIONSHIP_SECTIONS
from did_ledger.did.grammar import is_valid_did
from did_ledger.did.identifier import DIDURL
from did_ledger.errors import DIDError
from did_ledger.ledger.registry import IdentityLedger
from did_ledger.ledger.store import FileStore, InMemoryStore

console = Console()

_STORE_FILE_OPTION = click.option(
    "--store-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a JSON file acting as the ledger store. In-memory when omitted.",
)


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option(package_name="did-ledger")
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level.",
)
def cli(log_level: str) -> None:
    """W3C DID parsing, DID document normalization, and ledger storage"""
    logging.basicConfig(level=getattr(logging, log_level.upper()))


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from did_ledger import __version__

    console.print(f"[bold]did-ledger[/bold] v{__version__}")


# ------------------------------------------------------------------
# did command group
# ------------------------------------------------------------------


@cli.group(name="did")
def did_group() -> None:
    """Validate and parse DIDs and DID URLs."""


@did_group.command(name="validate")
@click.argument("did")
def validate_command(did: str) -> None:
    """Check DID against the DID grammar; exit 1 if it does not conform."""
    if is_valid_did(did):
        console.print(f"[green]Valid[/green] {escape(did)}")
    else:
        console.print(f"[red]Invalid[/red] {escape(did)}")
        sys.exit(1)


@did_group.command(name="parse")
@click.argument("did_url")
def parse_command(did_url: str) -> None:
    """Decompose DID_URL into method, method-specific id, path, query, and fragment."""
    try:
        parsed = DIDURL.parse(did_url)
    except DIDError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    table = Table(title=f"DID URL — {escape(did_url)}", show_header=True)
    table.add_column("Component", style="cyan")
    table.add_column("Value")
    table.add_row("scheme", parsed.did.scheme)
    table.add_row("method", parsed.did.method)
    table.add_row("method-specific-id", escape(parsed.did.method_specific_id))
    table.add_row("path", escape(parsed.path or ""))
    for key, values in parsed.queries.items():
        table.add_row(f"query {escape(key)}", escape(", ".join(values)))
    table.add_row("fragment", escape(parsed.fragment or ""))
    console.print(table)


# ------------------------------------------------------------------
# document command group
# ------------------------------------------------------------------


@cli.group(name="document")
def document_group() -> None:
    """Work with DID document payloads."""


@document_group.command(name="normalize")
@click.argument("document_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--summary",
    is_flag=True,
    default=False,
    help="Print a table of verification entries instead of the normalized JSON.",
)
def normalize_command(document_file: str, summary: bool) -> None:
    """Decode and normalize DOCUMENT_FILE, printing the canonical JSON."""
    try:
        document = DIDDocument.from_json(Path(document_file).read_bytes())
    except DIDError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    if not summary:
        click.echo(document.to_json())
        return

    table = Table(title=f"DID Document — {escape(document.id or '(no id)')}", show_header=True)
    table.add_column("Section", style="cyan")
    table.add_column("Method id")
    table.add_column("Type")
    table.add_column("Embedded", justify="center")

    for method in document.verification_method:
        table.add_row(
            "verificationMethod", escape(method.id), escape(method.type or ""), "Yes"
        )
    for relationship in RELATIONSHIP_SECTIONS:
        for entry in document.verifications(relationship):
            embedded = "[green]Yes[/green]" if entry.embedded else "No"
            table.add_row(
                relationship.value,
                escape(entry.method.id),
                escape(entry.method.type or ""),
                embedded,
            )

    console.print(table)
    console.print(f"\n  Proofs: {len(document.proof)}")


# ------------------------------------------------------------------
# identity command group
# ------------------------------------------------------------------


@cli.group(name="identity")
def identity_group() -> None:
    """Create, read, update, and delete DID documents on the ledger."""


@identity_group.command(name="create")
@click.argument("did")
@_STORE_FILE_OPTION
def create_command(did: str, store_file: str | None) -> None:
    """Store a minimal document for a new DID."""
    ledger = _open_ledger(store_file)
    try:
        document = ledger.create(did)
    except DIDError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)
    console.print(f"[green]Created[/green] identity [bold]{escape(document.id)}[/bold]")


@identity_group.command(name="read")
@click.argument("did")
@_STORE_FILE_OPTION
def read_command(did: str, store_file: str | None) -> None:
    """Print the document stored for DID."""
    ledger = _open_ledger(store_file)
    try:
        document = ledger.read(did)
    except DIDError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)
    if document is None:
        console.print(f"[red]Error:[/red] the identity {escape(did)} does not exist")
        sys.exit(1)
    click.echo(document.to_json())


@identity_group.command(name="update")
@click.argument("did")
@click.argument("document_file", type=click.Path(exists=True, dir_okay=False))
@_STORE_FILE_OPTION
def update_command(did: str, document_file: str, store_file: str | None) -> None:
    """Replace the document stored for DID with the one in DOCUMENT_FILE."""
    ledger = _open_ledger(store_file)
    try:
        document = DIDDocument.from_json(Path(document_file).read_bytes())
        ledger.update(did, document)
    except (DIDError, ValueError) as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)
    console.print(f"[green]Updated[/green] identity [bold]{escape(did)}[/bold]")


@identity_group.command(name="delete")
@click.argument("did")
@_STORE_FILE_OPTION
def delete_command(did: str, store_file: str | None) -> None:
    """Remove the document stored for DID."""
    ledger = _open_ledger(store_file)
    try:
        ledger.delete(did)
    except DIDError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)
    console.print(f"[red]Deleted[/red] identity [bold]{escape(did)}[/bold]")


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _open_ledger(store_file: str | None) -> IdentityLedger:
    """Return an IdentityLedger over a FileStore, or an in-memory store."""
    if store_file:
        return IdentityLedger(FileStore(store_file))
    console.print("[yellow]Warning:[/yellow] no --store-file given; changes will not persist.")
    return IdentityLedger(InMemoryStore())


if __name__ == "__main__":
    cli()
