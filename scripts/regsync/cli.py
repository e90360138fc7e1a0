"""
Command-line interface for RegulationsSync.

Provides commands for syncing Federal Register documents and inspecting the
resulting regulation store and search index.
"""

import logging

import click
from dotenv import load_dotenv

# Load environment variables from .env file (if it exists)
load_dotenv()

from . import __version__
from .commands.core import register_core_commands
from .commands.sync import sync
from .config import config

# Configure logging
logging.basicConfig(
    level=getattr(logging, str(config.get("logging.level", "INFO")).upper(), logging.INFO),
    format="%(asctime)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)
logger = logging.getLogger(__name__)


def setup_file_logging() -> None:
    """Set up file logging if enabled."""
    if config.get("logging.file_enabled", True):
        log_file = config.logs_dir / "regsync.log"
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(config.get("logging.format")))
        logging.getLogger().addHandler(file_handler)


@click.group()
@click.version_option(version=__version__, prog_name="regsync")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def cli(verbose: bool) -> None:
    """RegulationsSync - Sync Federal Register regulations into a searchable store."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    setup_file_logging()


cli.add_command(sync)
register_core_commands(cli)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
