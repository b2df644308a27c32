from __future__ import annotations

import json
from contextlib import ExitStack
from dataclasses import replace as dc_replace
from pathlib import Path

import typer
import yaml

from .config import ReaderConfig, load_config
from .errors import ConfigError, SourceOpenError
from .logging_setup import is_level_name, setup_logging
from .pipeline import process_dump
from .scanner import RevisionScanner
from .splits import FileSplit, plan_splits

app = typer.Typer(help="Wiki revision reader CLI.", no_args_is_help=True)


@app.callback()
def configure(
    log_level: str = typer.Option(
        "WARNING", "--log-level", help="Console log level (DEBUG, INFO, WARNING, ...)."
    ),
    log_dir: Path | None = typer.Option(
        None,
        "--log-dir",
        help="Write a timestamped DEBUG log file under this directory "
        "(overrides log_dir from the config).",
    ),
) -> None:
    """Configure logging before any sub-command runs."""
    if not is_level_name(log_level):
        raise typer.BadParameter(
            f"Unknown log level {log_level!r}.", param_hint="--log-level"
        )
    setup_logging(level=log_level.upper(), log_dir=log_dir)


@app.command()
def scan(
    path: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False),
    start: int = typer.Option(0, "--start", min=0, help="First byte of the split."),
    length: int | None = typer.Option(
        None, "--length", min=0, help="Split length in bytes (default: to end of file)."
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write JSONL here instead of stdout."
    ),
    render_text: bool = typer.Option(
        False, "--render-text/--no-render-text", help="Add rendered plain text."
    ),
    config: Path | None = typer.Option(None, "--config", "-c"),
) -> None:
    """Scan one split and emit its revisions as JSON lines."""
    cfg = _load(config)
    if length is None:
        length = max(path.stat().st_size - start, 0)
    split = FileSplit(path=str(path), start=start, length=length)
    try:
        scanner = RevisionScanner.open(split, chunk_size=cfg.read_chunk_size)
    except SourceOpenError as exc:
        raise typer.BadParameter(str(exc)) from exc

    include_text = render_text or cfg.render_text
    with ExitStack() as stack:
        stack.enter_context(scanner)
        out_file = None
        if output is not None:
            output.parent.mkdir(parents=True, exist_ok=True)
            out_file = stack.enter_context(output.open("w", encoding="utf-8"))
        for _, revision in scanner:
            line = json.dumps(revision.to_dict(include_text=include_text), ensure_ascii=False)
            if out_file is None:
                typer.echo(line)
            else:
                out_file.write(line + "\n")

    typer.echo(
        f"outcome={scanner.outcome.value} pages={scanner.pages_started} "
        f"revisions={scanner.revisions_emitted} skipped={scanner.revisions_skipped}",
        err=True,
    )
    if scanner.outcome.is_failure:
        raise typer.Exit(code=2)


@app.command()
def splits(
    path: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False),
    split_size: int | None = typer.Option(
        None, "--split-size", min=1, help="Override split_size from the config."
    ),
    config: Path | None = typer.Option(None, "--config", "-c"),
) -> None:
    """Print the planned splits of a dump file as JSON."""
    cfg = _load(config)
    size = split_size or cfg.split_size
    planned = [
        {"path": s.path, "start": s.start, "length": s.length}
        for s in plan_splits(path, size)
    ]
    typer.echo(json.dumps({"splits": planned}, indent=2))


@app.command()
def run(
    path: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False),
    config: Path | None = typer.Option(None, "--config", "-c"),
    workers: int | None = typer.Option(None, "--workers", "-w", min=1),
    output_dir: Path | None = typer.Option(None, "--output-dir", "-o", file_okay=False),
    split_size: int | None = typer.Option(None, "--split-size", min=1),
) -> None:
    """Scan every split of a dump in parallel and print a JSON summary."""
    cfg = _load(config)
    overrides = {}
    if workers is not None:
        overrides["workers"] = workers
    if output_dir is not None:
        overrides["output_dir"] = str(output_dir)
    if split_size is not None:
        overrides["split_size"] = split_size
    cfg = dc_replace(cfg, **overrides)

    results = process_dump(path, cfg)
    typer.echo(json.dumps({"splits": [r.to_dict() for r in results]}, indent=2))
    if any(not r.success for r in results):
        raise typer.Exit(code=2)


@app.command("print-config")
def print_config() -> None:
    """Print the default configuration as YAML."""
    cfg = ReaderConfig()
    typer.echo(yaml.safe_dump(cfg.to_dict(), sort_keys=False))


def main() -> None:
    app()


def _load(config: Path | None) -> ReaderConfig:
    try:
        cfg = load_config(config)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc
    # No-op when --log-dir already attached a file handler.
    if cfg.log_dir is not None:
        setup_logging(log_dir=cfg.log_dir)
    return cfg


if __name__ == "__main__":
    main()
