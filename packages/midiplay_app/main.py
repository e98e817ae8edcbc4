"""
midiplay CLI entry point

Run as:
    python -m midiplay_app
    midiplay (after pip install)
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from pathlib import Path
from types import FrameType

import click
import mido
from pydantic import ValidationError
from rich.console import Console

from midiplay_player import PlayerProcessError

from .config import settings
from .factory import create_app
from .loader import load_mapping_from_file
from .output import OutputFormatter


def setup_logging(debug: bool = False) -> None:
    """Configure logging"""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_mapping(formatter: OutputFormatter, mapping_file: str):
    try:
        return load_mapping_from_file(mapping_file)
    except ValidationError as e:
        formatter.error("Invalid mapping file", str(e))
        raise click.Abort()
    except (FileNotFoundError, ValueError) as e:
        formatter.error("Failed to load mapping file", str(e))
        raise click.Abort()


@click.group()
@click.option('--json', 'json_mode', is_flag=True, help='Output as JSON')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, json_mode: bool, debug: bool):
    """midiplay - MIDI controlled media playback

    Examples:
        midiplay ports
        midiplay check mapping.yaml
        midiplay run mapping.yaml --port "USB MIDI 1" --channel 0
    """
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug

    console = Console()
    ctx.obj['console'] = console
    ctx.obj['formatter'] = OutputFormatter(json_mode=json_mode, console=console)


@cli.command('ports')
@click.pass_context
def list_ports(ctx):
    """List available MIDI input ports"""
    formatter = ctx.obj['formatter']
    ports = list(mido.get_input_names())
    if not ports:
        formatter.info("No MIDI input ports available")
    formatter.table("MIDI input ports", ["port"], [[port] for port in ports])


@cli.command('check')
@click.argument('mapping_file', type=click.Path(exists=True))
@click.pass_context
def check_mapping(ctx, mapping_file: str):
    """Validate a mapping file and show its bindings

    Example:
        midiplay check mapping.yaml
    """
    formatter = ctx.obj['formatter']
    mapping = _load_mapping(formatter, mapping_file)

    formatter.table(
        f"Bindings ({Path(mapping_file).name})",
        ["type", "key", "action", "file", "args"],
        [
            [b.type, b.resolved_key, b.action, b.file, b.args or None]
            for b in mapping.bindings
        ],
    )
    formatter.success("Mapping is valid", {
        "channel": "all" if mapping.channel is None else mapping.channel,
        "bindings": len(mapping.bindings),
    })


@cli.command('run')
@click.argument('mapping_file', type=click.Path(exists=True), required=False)
@click.option('--port', 'port_name', default=None, help='MIDI input port name (default: first available)')
@click.option('--channel', type=click.IntRange(0, 15), default=None, help='Only route this MIDI channel (0-15)')
@click.option('--flags', default=None, help='Extra MPlayer flags')
@click.pass_context
def run(ctx, mapping_file: str | None, port_name: str | None, channel: int | None, flags: str | None):
    """Route MIDI input to the media player until interrupted

    Example:
        midiplay run mapping.yaml --channel 0
    """
    formatter = ctx.obj['formatter']
    setup_logging(ctx.obj['debug'])
    logger = logging.getLogger(__name__)

    mapping_file = mapping_file or (str(settings.mapping_file) if settings.mapping_file else None)
    if mapping_file is None:
        formatter.error("No mapping file", "Pass MAPPING_FILE or set MIDIPLAY_MAPPING_FILE")
        raise click.Abort()

    mapping = _load_mapping(formatter, mapping_file)
    app = create_app(settings, mapping, port_name=port_name, channel=channel, flags=flags)

    def signal_handler(signum: int, frame: FrameType | None) -> None:
        logger.info("Shutdown signal received")
        app.stop()

    try:
        if not app.connect():
            formatter.error("Could not open MIDI input", port_name or settings.input_port)
            raise click.Abort()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)
        asyncio.run(app.run())
    except PlayerProcessError as e:
        formatter.error("Player failed", str(e.__cause__ or e))
        raise click.Abort()
    finally:
        app.close()


def main() -> int:
    """Main entry point"""
    cli()
    return 0


if __name__ == "__main__":
    sys.exit(main())
