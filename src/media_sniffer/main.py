"""Main CLI entry point for Media Sniffer."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import hydra
from hydra.utils import to_absolute_path
from omegaconf import DictConfig
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import load_engine_config
from .errors import FetchError, InvalidInputError
from .extractor import MediaSniffer
from .fetcher import PageFetcher
from .models import ResultSet

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )


@hydra.main(version_base=None, config_path="../../conf", config_name="config")
def main(cfg: DictConfig) -> None:
    """Main entry point."""
    setup_logging(cfg.logging.level)
    sys.exit(run(cfg))


def run(cfg: DictConfig) -> int:
    """Run one extraction and print the result. Returns the process exit code."""
    try:
        result = run_extraction(cfg)
    except InvalidInputError as e:
        console.print(f"[red]Invalid input:[/red] {e.message}")
        return 2
    except FetchError as e:
        console.print(f"[red]Fetch failed:[/red] {e.message}")
        return 1

    if cfg.output.format == "json":
        console.print_json(json.dumps(result.to_downloader(), ensure_ascii=False))
    else:
        show_result(result)
    return 0


def run_extraction(cfg: DictConfig, fetcher: Optional[PageFetcher] = None) -> ResultSet:
    """
    Direct-link shortcut, else fetch (or read) the page and run the engine.

    Raises:
        InvalidInputError: Missing URL or unusable page text
        FetchError: The page could not be fetched
    """
    url = cfg.input.url
    if not url:
        raise InvalidInputError("input.url is required, e.g. input.url=https://example.com/watch")

    sniffer = MediaSniffer(load_engine_config(cfg.get("engine")))

    direct = sniffer.direct_link(url, user_agent=cfg.fetcher.user_agent)
    if direct is not None and not cfg.input.file:
        logger.info(f"{url} is a direct media link, skipping page fetch")
        return direct

    if cfg.input.file:
        path = Path(to_absolute_path(cfg.input.file))
        if not path.is_file():
            raise InvalidInputError(f"File not found: {path}")
        page_text = path.read_text(encoding="utf-8", errors="replace")
        return sniffer.extract(page_text, url, user_agent=cfg.fetcher.user_agent)

    fetcher = fetcher or PageFetcher(
        timeout=cfg.fetcher.timeout,
        user_agent=cfg.fetcher.user_agent,
        browser=cfg.fetcher.browser,
        platform=cfg.fetcher.platform,
    )
    page = fetcher.fetch(url)
    return sniffer.extract(page.text, page.final_url, user_agent=page.user_agent)


def show_result(result: ResultSet) -> None:
    """Display the result set as a table."""
    console.print(f"[bold blue]{result.title}[/bold blue]")
    console.print(f"[cyan]Page:[/cyan] {result.page_url}")
    console.print()

    if result.is_empty:
        console.print("[yellow]No media found.[/yellow]")
        return

    summary = ", ".join(f"{kind}: {len(items)}" for kind, items in result.by_kind().items())
    console.print(f"[cyan]Found:[/cyan] {summary}")

    table = Table(title=f"Media ({len(result)})")
    table.add_column("#", style="dim")
    table.add_column("Name", style="green")
    table.add_column("Kind", style="cyan")
    table.add_column("Ext")
    table.add_column("Download")
    table.add_column("URL", overflow="fold")

    for idx, item in enumerate(result.items, 1):
        url = item.url
        if item.note:
            url = f"{url}\n[yellow]{item.note}[/yellow]"
        download = "[green]yes[/green]" if item.is_downloadable else "[red]no[/red]"
        table.add_row(str(idx), item.name, item.kind, item.extension, download, url)

    console.print(table)


if __name__ == "__main__":
    main()
