from __future__ import annotations

from pathlib import Path
from typing import NoReturn, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from paper_gen.data_models import UploadedPdf
from paper_gen.errors import PaperGenError
from paper_gen.services import GenerationService
from paper_gen.system import PaperSystem

app = typer.Typer(help="Generate exam questions from a PDF through the relay or the upstream API.")
settings_app = typer.Typer(help="Show or change the persisted request settings.")
app.add_typer(settings_app, name="settings")
console = Console()

candidate_paths = [Path.cwd() / ".env"]
module_env = Path(__file__).resolve().parents[2] / ".env"
if module_env not in candidate_paths:
    candidate_paths.append(module_env)
for env_path in candidate_paths:
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)
        break


def _load_service(config: Optional[Path]) -> GenerationService:
    """Instantiate `PaperSystem` from the optional config path and wrap it in the service layer."""
    return GenerationService(PaperSystem.from_config(config))


def _fail(exc: PaperGenError) -> NoReturn:
    console.print(f"[bold red]{exc.title}[/bold red]: {exc}")
    raise typer.Exit(code=1)


def _finish(service: GenerationService, text: str, fmt: str, output: Optional[Path]) -> None:
    console.print("[bold]Result[/bold]")
    console.print(text, soft_wrap=True, highlight=False)
    if service.last_delivery is not None:
        console.print(f"\n[dim]via {service.last_delivery.endpoint}[/dim]")
    if fmt == "none":
        return
    path = service.save_download(fmt, directory=output)  # type: ignore[arg-type]
    console.print(f"Saved [green]{path}[/green]")


@app.command()
def generate(
    query: str = typer.Argument(..., help="What to generate, e.g. '10 MCQs on chapter 3'."),
    pdf: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, readable=True, help="Source PDF."),
    fmt: str = typer.Option("pdf", "--format", help="Download format: pdf, txt or none."),
    output: Optional[Path] = typer.Option(None, file_okay=False, help="Directory for the download."),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
):
    """
    Send a query (and PDF) through the candidate endpoints and print the result.

    Validation runs before any request. The first endpoint answering with usable JSON or
    text wins; the generated paper is then saved in the requested format.
    """
    if fmt not in ("pdf", "txt", "none"):
        raise typer.BadParameter("format must be one of: pdf, txt, none")
    service = _load_service(config)
    try:
        if pdf is not None:
            service.attach_file(UploadedPdf.from_path(pdf))
        with console.status("Generating..."):
            text = service.submit(query=query)
    except PaperGenError as exc:
        _fail(exc)
    _finish(service, text, fmt, output)


@app.command()
def paper(
    class_name: str = typer.Argument(..., help="Class folder in the catalog."),
    subject: str = typer.Argument(..., help="Subject PDF name (with or without .pdf)."),
    total_marks: int = typer.Argument(..., help="Total marks, clamped to 20-100."),
    fmt: str = typer.Option("pdf", "--format", help="Download format: pdf, txt or none."),
    output: Optional[Path] = typer.Option(None, file_okay=False),
    config: Optional[Path] = typer.Option(None),
):
    """Build a full sectioned exam paper prompt for a catalog PDF and generate it."""
    service = _load_service(config)
    try:
        with console.status("Generating paper..."):
            text = service.generate_paper(class_name, subject, total_marks)
    except PaperGenError as exc:
        _fail(exc)
    _finish(service, text, fmt, output)


@app.command()
def catalog(config: Optional[Path] = typer.Option(None)):
    """List the bundled syllabus PDFs by class."""
    service = _load_service(config)
    paper_catalog = service.system.catalog
    classes = paper_catalog.classes()
    if not classes:
        console.print(f"No PDFs found under {paper_catalog.root}")
        return
    table = Table("Class", "Subject", "File")
    for class_name in classes:
        for source in paper_catalog.subjects(class_name):
            table.add_row(class_name, source.subject, str(source.path))
    console.print(table)


@settings_app.command("show")
def settings_show(config: Optional[Path] = typer.Option(None)):
    service = _load_service(config)
    table = Table("Setting", "Value")
    for key, value in service.settings.to_storage().items():
        table.add_row(key, repr(value))
    console.print(table)


@settings_app.command("set")
def settings_set(
    initial_timeout_ms: Optional[int] = typer.Option(None, help="Timeout for the first attempt (>= 5000)."),
    retry_timeout_ms: Optional[int] = typer.Option(None, help="Timeout for later attempts (>= 5000)."),
    auto_retry: Optional[bool] = typer.Option(None, "--auto-retry/--no-auto-retry"),
    default_query: Optional[str] = typer.Option(None),
    config: Optional[Path] = typer.Option(None),
):
    """Update only the given settings; the rest keep their stored values."""
    changes = {
        "initial_timeout_ms": initial_timeout_ms,
        "retry_timeout_ms": retry_timeout_ms,
        "auto_retry": auto_retry,
        "default_query": default_query,
    }
    changes = {key: value for key, value in changes.items() if value is not None}
    if not changes:
        raise typer.BadParameter("Nothing to update.")
    service = _load_service(config)
    try:
        service.save_settings(changes)
    except ValueError as exc:
        console.print(f"[bold red]Invalid settings[/bold red]: {exc}")
        raise typer.Exit(code=1)
    console.print("Saved. Settings updated.")


@settings_app.command("reset")
def settings_reset(config: Optional[Path] = typer.Option(None)):
    _load_service(config).reset_settings()
    console.print("Settings reset to defaults.")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (defaults to relay.host)."),
    port: Optional[int] = typer.Option(None, help="Port (defaults to relay.port)."),
    config: Optional[Path] = typer.Option(None),
):
    """Run the relay service with uvicorn."""
    import uvicorn

    from paper_gen.relay import create_app

    system = PaperSystem.from_config(config)
    relay_app = create_app(system.config, session=system.session)
    uvicorn.run(
        relay_app,
        host=host or system.config.relay.host,
        port=port or system.config.relay.port,
        log_level=system.config.logging.level.lower(),
    )


if __name__ == "__main__":
    app()
