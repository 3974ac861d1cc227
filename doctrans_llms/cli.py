"""
Command-line interface for DocTrans-LLMs.

Provides commands for:
- Translating typed text or uploaded files with a streaming LLM
- Extracting text from supported files
- Exporting text to plain, Word or print (PDF) formats
- Managing API keys

Usage:
    doctrans translate --input paper.pdf --target persian --output out.docx
    doctrans translate --text "Hello" --backend dummy
    doctrans extract --input notes.md
    doctrans export --input translated.txt --format .pdf
    doctrans keys set openai
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from doctrans_llms import __version__
from doctrans_llms.config import (
    DEFAULT_BACKEND,
    EXPORT_EXTENSIONS,
    SUPPORTED_EXTENSIONS,
    configure_logging,
)
from doctrans_llms.errors import ExportError, ExtractionError, ProviderStreamError
from doctrans_llms.ingest import extract_file
from doctrans_llms.keys import SERVICES, KeyManager, provider_config
from doctrans_llms.models import (
    Document,
    ExportKind,
    Language,
    SessionStatus,
    TranslationRequest,
    normalize_extension,
)
from doctrans_llms.render import FileDelivery, export, mime_type_for
from doctrans_llms.session import StreamingOrchestrator
from doctrans_llms.translate import create_provider
from doctrans_llms.utils import default_export_extension, parse_file_name

app = typer.Typer(
    name="doctrans",
    help="DocTrans-LLMs: streaming document translation with multi-format export",
    add_completion=False,
)
keys_app = typer.Typer(help="Manage provider API keys.")
app.add_typer(keys_app, name="keys")
console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"DocTrans-LLMs v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False, "--verbose",
        help="Show debug logging",
    ),
):
    """DocTrans-LLMs: translate documents and export them."""
    configure_logging(verbose)


def _parse_language(value: str, allow_auto: bool) -> Language:
    try:
        language = Language.parse(value)
    except ValueError as e:
        raise typer.BadParameter(str(e))
    if language is Language.AUTO and not allow_auto:
        raise typer.BadParameter("Target language cannot be Auto Detect")
    return language


def _progress() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        console=console,
    )


def _load_document(input_text: Optional[str], input_file: Optional[Path]) -> Document:
    if input_text is not None:
        return Document.from_text(input_text)

    with _progress() as progress:
        task = progress.add_task(f"Reading {input_file.name}...", total=100)
        try:
            document = extract_file(
                input_file,
                on_progress=lambda pct: progress.update(task, completed=pct),
            )
        except ExtractionError as e:
            progress.stop()
            console.print(f"[red]Error:[/] {e}")
            raise typer.Exit(1)
    console.print(
        f"[green]Loaded:[/] {input_file.name} ({len(document.content)} chars)"
    )
    return document


def _resolve_output(
    output: Optional[Path],
    export_format: Optional[str],
    base_name: str,
    suggested_extension: str,
) -> tuple[Path, str, str]:
    """Work out (directory, base name, extension) for an export."""
    if output is not None and output.suffix and not output.is_dir():
        directory, base_name = output.parent, output.stem
        extension = export_format or output.suffix
    else:
        directory = output or Path.cwd()
        extension = export_format or suggested_extension

    extension = normalize_extension(extension)
    if extension not in EXPORT_EXTENSIONS:
        console.print(
            f"[yellow]{extension} is not an export format; saving as plain text.[/]"
        )
    return directory, base_name, extension


def _show_partial(session) -> None:
    if session is not None and session.has_output:
        console.print("[yellow]Partial translation:[/]\n")
        console.print(session.accumulated_text, markup=False, highlight=False)


def _save(
    content: str,
    directory: Path,
    base_name: str,
    extension: str,
    open_browser: bool,
) -> None:
    artifact = export(content, base_name, extension)
    delivery = FileDelivery(directory, open_browser=open_browser)

    with _progress() as progress:
        task = progress.add_task("Saving...", total=100)
        try:
            path = delivery.deliver(
                artifact,
                on_progress=lambda pct: progress.update(task, completed=pct),
                staged=True,
            )
        except ExportError as e:
            progress.stop()
            console.print(f"[red]Failed to save file:[/] {e}")
            console.print("[dim]The translation is kept; run the export again to retry.[/]")
            raise typer.Exit(1)

    if artifact.kind is ExportKind.PRINT:
        console.print(f"[green]Print page ready:[/] {path} (use the print dialog to save as PDF)")
    else:
        console.print(f"[green]Saved to:[/] {path}")


@app.command()
def translate(
    input_text: Optional[str] = typer.Option(
        None, "--text", "-t",
        help="Text to translate",
    ),
    input_file: Optional[Path] = typer.Option(
        None, "--input", "-i",
        help=f"Input file ({', '.join(SUPPORTED_EXTENSIONS)})",
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o",
        help="Output file or directory",
    ),
    export_format: Optional[str] = typer.Option(
        None, "--format", "-f",
        help="Export extension (defaults to the input's, when exportable)",
    ),
    source_lang: str = typer.Option(
        Language.AUTO.value, "--source", "-s",
        help="Source language (english, persian, auto)",
    ),
    target_lang: str = typer.Option(
        Language.PERSIAN.value, "--target", "-l",
        help="Target language (english, persian)",
    ),
    backend: str = typer.Option(
        DEFAULT_BACKEND, "--backend", "-b",
        help="Provider backend (openai, deepseek, anthropic, dummy)",
    ),
    model: Optional[str] = typer.Option(
        None, "--model", "-m",
        help="Model name for LLM backends",
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout",
        help="Give up if the translation takes longer (seconds)",
    ),
    swap: bool = typer.Option(
        False, "--swap",
        help="Swap source and target languages",
    ),
    no_open: bool = typer.Option(
        False, "--no-open",
        help="Do not open the print page for PDF exports",
    ),
):
    """Translate text or a document and optionally export it."""
    if input_text is None and input_file is None:
        console.print("[red]Error:[/] Provide either --text or --input", style="bold")
        raise typer.Exit(1)

    source = _parse_language(source_lang, allow_auto=True)
    target = _parse_language(target_lang, allow_auto=False)
    document = _load_document(input_text, input_file)

    request = TranslationRequest(source, target, document.content)
    if swap:
        request = request.swapped()
    if request.is_empty:
        console.print("[yellow]Nothing to translate.[/]")
        raise typer.Exit(0)

    try:
        provider = create_provider(backend, provider_config(backend, model, timeout))
    except ValueError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)

    orchestrator = StreamingOrchestrator(provider)

    with _progress() as progress:
        task = progress.add_task(f"Translating with {provider.name}...", total=100)
        try:
            session = orchestrator.translate(
                request,
                on_progress=lambda snap: progress.update(task, completed=snap.progress),
                timeout=timeout,
            )
        except ProviderStreamError as e:
            progress.stop()
            console.print(f"[red]Translation failed:[/] {e}")
            _show_partial(orchestrator.current)
            raise typer.Exit(1)
        except KeyboardInterrupt:
            progress.stop()
            console.print("[yellow]Interrupted.[/]")
            _show_partial(orchestrator.current)
            raise typer.Exit(130)

    if session.status is not SessionStatus.SUCCESS:
        raise typer.Exit(1)

    console.print("[bold green]Translation complete![/]")
    table = Table(title="Translation Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Provider", provider.name)
    table.add_row(
        "Languages",
        f"{request.source_language.value} → {request.target_language.value}",
    )
    table.add_row("Source chars", str(len(request.text)))
    table.add_row("Translated chars", str(len(session.accumulated_text)))
    console.print(table)

    if output is None and export_format is None:
        console.print("\n[bold]Translated text:[/]\n")
        console.print(session.accumulated_text, markup=False, highlight=False)
        return

    directory, base_name, extension = _resolve_output(
        output,
        export_format,
        document.export_base_name,
        default_export_extension(document.extension),
    )
    _save(session.accumulated_text, directory, base_name, extension, not no_open)


@app.command()
def extract(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="File to extract text from",
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o",
        help="Write the text to this file instead of printing it",
    ),
):
    """Extract plain text from a supported file."""
    document = _load_document(None, input_file)
    if output is None:
        console.print(document.content, markup=False, highlight=False)
        return
    output.write_text(document.content, encoding="utf-8")
    console.print(f"[green]Saved to:[/] {output}")


@app.command("export")
def export_command(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="UTF-8 text file to export",
    ),
    export_format: Optional[str] = typer.Option(
        None, "--format", "-f",
        help="Export extension (.txt, .docx, .pdf, ...)",
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o",
        help="Output file or directory",
    ),
    no_open: bool = typer.Option(
        False, "--no-open",
        help="Do not open the print page for PDF exports",
    ),
):
    """Export an existing text file to another format."""
    try:
        content = input_file.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error:[/] Failed to read {input_file}: {e}")
        raise typer.Exit(1)

    base_name, extension = parse_file_name(input_file.name)
    directory, base_name, extension = _resolve_output(
        output, export_format, base_name, default_export_extension(extension),
    )
    _save(content, directory, base_name, extension, not no_open)


@app.command()
def formats():
    """List supported input and export formats."""
    table = Table(title="File formats")
    table.add_column("Extension", style="cyan")
    table.add_column("Input", style="green")
    table.add_column("Export", style="green")
    table.add_column("Kind")
    table.add_column("MIME type", style="dim")

    for ext in sorted(set(SUPPORTED_EXTENSIONS) | set(EXPORT_EXTENSIONS)):
        kind = ExportKind.for_extension(ext)
        if kind is ExportKind.PLAIN:
            mime = mime_type_for(ext)
        elif kind is ExportKind.RICH:
            mime = "Word document (HTML)"
        else:
            mime = "print page (HTML)"
        table.add_row(
            ext,
            "✓" if ext in SUPPORTED_EXTENSIONS else "",
            "✓" if ext in EXPORT_EXTENSIONS else "",
            kind.value,
            mime,
        )
    console.print(table)


@app.command()
def languages():
    """List available languages."""
    table = Table(
        title="Languages",
        caption="--swap with Auto Detect as source translates from the old target into English",
    )
    table.add_column("Language", style="cyan")
    table.add_column("Direction")
    table.add_column("Usable as")
    for language in Language:
        usable = "source" if language is Language.AUTO else "source, target"
        table.add_row(language.value, language.direction, usable)
    console.print(table)


@keys_app.command("set")
def keys_set(
    service: str = typer.Argument(..., help=f"Service ({', '.join(SERVICES)})"),
    key: str = typer.Option(
        ..., "--key",
        prompt=True,
        hide_input=True,
        help="API key",
    ),
):
    """Store an API key."""
    location = KeyManager().set_key(service, key)
    console.print(f"[green]Stored {service} key in {location}.[/]")


@keys_app.command("show")
def keys_show():
    """Show which API keys are configured."""
    table = Table(title="API keys")
    table.add_column("Service", style="cyan")
    table.add_column("Source")
    table.add_column("Key", style="dim")
    for info in KeyManager().list_keys():
        table.add_row(
            info.service,
            info.source if info.is_set else "[yellow]not set[/]",
            info.masked_value,
        )
    console.print(table)


@keys_app.command("delete")
def keys_delete(
    service: str = typer.Argument(..., help="Service name"),
):
    """Delete a stored API key."""
    if KeyManager().delete_key(service):
        console.print(f"[green]Deleted {service} key.[/]")
    else:
        console.print(f"[yellow]No stored key for {service}.[/]")


if __name__ == "__main__":
    app()
