"""
CLI Module

Command line entry point for the icon extractor providing:
- Banner and final summary rendered with rich
- Per-application progress through the colored logger
- Optional JSON run report
"""

import json
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

import click
from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .backends import ConversionBackend
from .common.logger import get_logger, set_log_level, setup_logging
from .common.utils import format_duration, format_size
from .env import env, get_config_summary
from .errors import ConfigurationError
from .extractor import IconExtractor
from .resolver import IconSourceResolver
from .scanner import BundleScanner
from .summary import RunSummary
from .writer import OutputWriter

logger = get_logger(__name__)

DEFAULT_OUTPUT_DIR = './app_icons'


class ExtractorCLI:
    """Wires the pipeline together for one command line run"""

    def __init__(self, output_dir: str, config=None,
                 scanner: Optional[BundleScanner] = None,
                 backend: Optional[ConversionBackend] = None,
                 console: Optional[Console] = None):
        self.config = config if config is not None else env
        self.output_dir = Path(output_dir)
        self.scanner = scanner or BundleScanner()
        self.backend = backend or ConversionBackend.from_config(self.config)
        self.writer = OutputWriter(self.output_dir)
        self.console = console or Console()

    def print_banner(self) -> None:
        header = "[bold blue]macOS Application Icon Extractor[/bold blue]\n"
        header += "[dim]Converting .icns to high-resolution PNG[/dim]"
        self.console.print(Panel(Align.center(header), border_style="blue", padding=(1, 2)))

    def print_summary(self, summary: RunSummary, duration: float) -> None:
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("Label")
        table.add_column("Value", justify="right")
        table.add_row("[cyan]Total applications found:[/cyan]", str(summary.total))
        table.add_row("[green]Successfully extracted:[/green]", str(summary.successful))
        table.add_row("[yellow]Skipped (already exist):[/yellow]", str(summary.skipped))
        table.add_row("[red]Failed:[/red]", str(summary.failed))
        table.add_row("[cyan]Duration:[/cyan]", format_duration(duration))

        if summary.successful > 0:
            table.add_row("[green]Output directory:[/green]", str(self.output_dir))
            table.add_row("[green]Total PNG files:[/green]", str(summary.png_count))
            table.add_row("[green]Total size:[/green]", format_size(summary.total_png_bytes))

        self.console.print()
        self.console.print(Panel(table, title="SUMMARY", border_style="bold"))

        if summary.failed_list:
            self.console.print("  [red]Failed applications:[/red]")
            for entry in summary.failed_list:
                self.console.print(f"    - {entry}", markup=False)

        if summary.interrupted:
            self.console.print("  [yellow]Run interrupted before all applications were processed[/yellow]")

    def write_report(self, summary: RunSummary, start_time: datetime, end_time: datetime) -> Optional[Path]:
        """Write the JSON run report if one was configured"""
        if not self.config.report_file:
            return None

        report_path = Path(self.config.report_file).expanduser()
        report = {
            'start_time': start_time.isoformat(),
            'end_time': end_time.isoformat(),
            'duration_seconds': (end_time - start_time).total_seconds(),
            'output_directory': str(self.output_dir),
            'summary': summary.to_dict(),
        }

        try:
            report_path.parent.mkdir(parents=True, exist_ok=True)
            with open(report_path, 'w', encoding='utf-8') as f:
                json.dump(report, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.warning(f"[⚠] Could not write report {report_path}: {e}")
            return None

        logger.info(f"[INFO] Report written to {report_path}")
        return report_path

    def run(self) -> int:
        """Main execution; returns the process exit code"""
        self.print_banner()

        self.writer.ensure_output_dir()
        logger.info(f"[INFO] Output directory: {self.output_dir}")
        logger.debug(f"Configuration: {get_config_summary()}")

        start_time = datetime.now()
        started = time.monotonic()

        summary = RunSummary()
        try:
            logger.info("[INFO] Scanning for applications...")
            bundles = self.scanner.find_all()
            logger.info(f"[INFO] Found {len(bundles)} applications to process")

            extractor = IconExtractor(IconSourceResolver(), self.backend, self.writer)
            extractor.run(bundles, summary)
        except KeyboardInterrupt:
            summary.interrupted = True

        summary.finalize(self.output_dir)
        self.print_summary(summary, time.monotonic() - started)
        self.write_report(summary, start_time, datetime.now())

        return summary.exit_code


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.argument('output_directory', required=False, default=DEFAULT_OUTPUT_DIR,
                type=click.Path(file_okay=False, dir_okay=True))
@click.option('--verbose', '-v', is_flag=True, help='Show debug output on the console')
def main(output_directory, verbose):
    """Extract every installed application's icon into OUTPUT_DIRECTORY as PNG."""
    setup_logging()
    if verbose:
        set_log_level('DEBUG', 'console')

    try:
        env.validate()
        cli = ExtractorCLI(output_directory)
    except ConfigurationError as e:
        error = click.ClickException(str(e))
        error.exit_code = 2
        raise error

    try:
        exit_code = cli.run()
    except OSError as e:
        raise click.ClickException(f"Cannot use output directory {output_directory}: {e}")

    sys.exit(exit_code)


if __name__ == '__main__':
    main()
