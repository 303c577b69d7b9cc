"""
Command-line interface for pdfstructx.
"""

import json
import os
import sys

import click
from rich.console import Console
from rich.table import Table

from pdfstructx import __version__
from pdfstructx.exceptions import PdfStructXError
from pdfstructx.reader import PdfContentAssembler
from pdfstructx.types import ReaderOptions
from pdfstructx.utils import configure_logging

console = Console()
error_console = Console(stderr=True)


def _fail(error):
    error_console.print(f"[bold red]✗ Error:[/bold red] {error}")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose):
    """
    pdfstructx - Recover chapters, index entries and reading order from PDFs.
    """
    if verbose:
        configure_logging(verbose=True)


@cli.command(name="pages")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--output', '-o',
    default=None,
    help='Write JSON to this file instead of stdout',
    type=click.Path(dir_okay=False, writable=True)
)
@click.option(
    '--workers', '-w',
    default=1,
    show_default=True,
    help='Number of threads used to build pages',
    type=click.IntRange(min=1)
)
@click.option(
    '--indent',
    default=2,
    show_default=True,
    help='JSON indentation',
    type=click.IntRange(min=0)
)
def show_pages(input_pdf, output, workers, indent):
    """
    Write the structured page records of a PDF as JSON.

    Examples:

        pdfstructx pages book.pdf

        pdfstructx pages book.pdf -o book.json --workers 4
    """
    try:
        with PdfContentAssembler.open(input_pdf, options=ReaderOptions(workers=workers)) as session:
            records = [page.to_dict() for page in session.pages()]
    except PdfStructXError as e:
        _fail(e)

    payload = json.dumps(records, indent=indent or None, ensure_ascii=False)
    if output is None:
        click.echo(payload)
        return

    with open(output, 'w', encoding='utf-8') as handle:
        handle.write(payload)
    console.print(f"[bold green]✓ Wrote {len(records)} pages[/bold green]")
    console.print(f"[dim]Output file: {os.path.abspath(output)}[/dim]")


@cli.command(name="chapters")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
def show_chapters(input_pdf):
    """
    List the chapters recovered from the PDF outline.

    Example:

        pdfstructx chapters book.pdf
    """
    try:
        with PdfContentAssembler.open(input_pdf) as session:
            chapters = session.chapters
    except PdfStructXError as e:
        _fail(e)

    if not chapters:
        console.print("[yellow]No chapters found in the document outline.[/yellow]")
        return

    table = Table(title=f"Chapters: {os.path.basename(input_pdf)}")
    table.add_column("Start page", style="cyan", justify="right")
    table.add_column("Title", style="green")
    for chapter in chapters:
        table.add_row(str(chapter.start_page), chapter.title)

    console.print()
    console.print(table)
    console.print()


@cli.command(name="index")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
def show_index(input_pdf):
    """
    List the back-of-book index entries of the PDF.

    Example:

        pdfstructx index book.pdf
    """
    try:
        with PdfContentAssembler.open(input_pdf) as session:
            index = session.index
    except PdfStructXError as e:
        _fail(e)

    if index is None:
        console.print("[yellow]No index found in the document.[/yellow]")
        return

    table = Table(title=f"Index: {os.path.basename(input_pdf)}")
    table.add_column("Entry", style="cyan")
    table.add_column("Pages", style="green")
    table.add_column("Front matter", style="magenta")
    for entry in index.entries:
        table.add_row(
            entry.name,
            ", ".join(str(page) for page in entry.pages),
            ", ".join(entry.front_matter_pages),
        )

    console.print()
    console.print(table)
    console.print(f"[dim]Index pages: {index.index_pages[0]}-{index.index_pages[-1]}[/dim]")
    console.print()


@cli.command(name="info")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
def show_info(input_pdf):
    """
    Display the structure summary of a PDF file.

    Example:

        pdfstructx info book.pdf
    """
    try:
        with PdfContentAssembler.open(input_pdf) as session:
            info = session.describe()
    except PdfStructXError as e:
        _fail(e)

    table = Table(title=f"Document Structure: {os.path.basename(input_pdf)}")
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")

    table.add_row("File Path", info.path)
    table.add_row("Number of Pages", str(info.page_count))
    table.add_row("Outline", "Yes" if info.has_outline else "No")
    table.add_row("Chapters", str(info.chapter_count))
    table.add_row("Page Labels", "Yes" if info.has_page_labels else "No")
    table.add_row("Page Offset", str(info.page_offset))
    if info.index_pages:
        table.add_row("Index Pages", f"{info.index_pages[0]}-{info.index_pages[-1]}")
        table.add_row("Index Entries", str(info.index_entry_count))
    else:
        table.add_row("Index Pages", "None")

    console.print()
    console.print(table)
    console.print()


if __name__ == '__main__':
    cli()
