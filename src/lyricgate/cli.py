"""Command-line interface using Click."""

import mimetypes
import sys
from functools import wraps
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .config import WorkflowConfig, get_data_dir
from .core.embed import EmbedService
from .core.lrc import format_lrc, parse_lrc
from .core.lrclib import LrcLibClient
from .core.lyrics_fetch import acquire_synced, search_synced
from .core.models import LyricsResult, UploadFile
from .core.quota import QuotaTracker
from .core.storage_local import JsonCredentialStore, JsonRecordStore, LocalObjectStore
from .core.upload import UploadWorkflow
from .exceptions import LyricGateError
from .utils.logging import setup_logging


def _build_workflow(data_dir: Optional[str]) -> UploadWorkflow:
    root = Path(data_dir) if data_dir else get_data_dir()
    return UploadWorkflow(
        LocalObjectStore(root / "objects"),
        JsonRecordStore(root / "songs.json"),
        config=WorkflowConfig(),
    )


def _build_tracker(data_dir: Optional[str]) -> QuotaTracker:
    root = Path(data_dir) if data_dir else get_data_dir()
    return QuotaTracker(JsonCredentialStore(root / "keys.json"))


def _echo_lyrics(result: LyricsResult) -> None:
    click.echo(f"Classification: {result.classification.value}")
    if result.timeline:
        click.echo(format_lrc(result.timeline))
    elif result.raw_text:
        click.echo(result.raw_text)


def _handle_errors(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except LyricGateError as e:
            click.echo(f"❌ {e}", err=True)
            sys.exit(1)

    return wrapper


data_dir_option = click.option(
    "--data-dir", type=click.Path(file_okay=False), help="Data directory"
)
owner_option = click.option("--owner", required=True, help="Owner id")


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Log to file")
@click.pass_context
def cli(ctx, verbose, log_file):
    """lyricgate - upload songs only when synced lyrics exist."""
    ctx.ensure_object(dict)
    setup_logging(
        level="DEBUG" if verbose else "INFO",
        log_file=Path(log_file) if log_file else None,
        verbose=verbose,
    )


@cli.command()
@click.argument("lrc_file", type=click.File("r", encoding="utf-8"))
def parse(lrc_file):
    """Parse an LRC file and print the normalized timeline."""
    timeline = parse_lrc(lrc_file.read())
    if not timeline:
        click.echo("No timed lyric lines found", err=True)
        sys.exit(1)
    click.echo(format_lrc(timeline))


@cli.command()
@click.argument("artist")
@click.argument("title")
@click.option("--timeout", type=float, default=None, help="Request timeout in seconds")
def lyrics(artist, title, timeout):
    """Look up lyrics for ARTIST and TITLE on LRCLIB."""
    client = LrcLibClient(timeout=timeout) if timeout else LrcLibClient()
    _echo_lyrics(acquire_synced(artist, title, client=client))


@cli.command()
@click.argument("query")
def search(query):
    """Free-text LRCLIB search; shows the first hit."""
    _echo_lyrics(search_synced(query))


@cli.command()
@click.argument("audio_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--title", required=True, help="Song title")
@click.option("--artist", required=True, help="Song artist")
@owner_option
@click.option("--yes", "-y", is_flag=True, help="Confirm lyrics without prompting")
@data_dir_option
@_handle_errors
def upload(audio_file, title, artist, owner, yes, data_dir):
    """Upload AUDIO_FILE once synced lyrics are found."""
    path = Path(audio_file)
    content_type, _ = mimetypes.guess_type(path.name)
    file = UploadFile(
        filename=path.name, content=path.read_bytes(), content_type=content_type
    )

    workflow = _build_workflow(data_dir)
    receipt = workflow.upload(file, title, artist, owner)

    click.echo(f"Found synced lyrics ({receipt.line_count} lines):")
    click.echo(receipt.lyrics_preview)
    if yes or click.confirm("Are these the right lyrics?", default=True):
        workflow.confirm(receipt.asset_id, owner)
        click.echo(f"✅ Uploaded song {receipt.asset_id}")
    else:
        workflow.reject(receipt.asset_id, owner)
        click.echo("Upload discarded")


@cli.command()
@click.argument("asset_id")
@owner_option
@data_dir_option
@_handle_errors
def confirm(asset_id, owner, data_dir):
    """Confirm a pending upload."""
    _build_workflow(data_dir).confirm(asset_id, owner)
    click.echo(f"✅ Confirmed song {asset_id}")


@cli.command()
@click.argument("asset_id")
@owner_option
@data_dir_option
@_handle_errors
def reject(asset_id, owner, data_dir):
    """Reject a pending upload and delete its audio."""
    _build_workflow(data_dir).reject(asset_id, owner)
    click.echo(f"Rejected song {asset_id}")


@cli.command()
@owner_option
@data_dir_option
@_handle_errors
def songs(owner, data_dir):
    """List an owner's confirmed songs."""
    workflow = _build_workflow(data_dir)
    assets = workflow.list_assets(owner)
    if not assets:
        click.echo("No songs")
        return
    for asset in assets:
        click.echo(
            f"{asset.id}  {asset.artist} - {asset.title}  "
            f"weight={asset.frequency_weight} offset={asset.sync_offset_ms}ms "
            f"lines={len(asset.timeline)}"
        )
    click.echo(f"{len(assets)}/{workflow.config.max_assets_per_owner} songs")


@cli.command()
@click.argument("asset_id")
@owner_option
@data_dir_option
@click.confirmation_option(prompt="Are you sure you want to delete this song?")
@_handle_errors
def delete(asset_id, owner, data_dir):
    """Delete a confirmed song and its audio."""
    _build_workflow(data_dir).delete(asset_id, owner)
    click.echo(f"✅ Deleted song {asset_id}")


@cli.command()
@click.argument("asset_id")
@owner_option
@click.option("--weight", type=int, required=True, help="Frequency weight (1-5)")
@click.option("--offset", type=int, default=None, help="Lyrics sync offset in ms")
@data_dir_option
@_handle_errors
def settings(asset_id, owner, weight, offset, data_dir):
    """Update a song's frequency weight and, if given, its sync offset."""
    workflow = _build_workflow(data_dir)
    if offset is None:
        asset = workflow.update_weight(asset_id, owner, weight)
    else:
        asset = workflow.update_settings(asset_id, owner, weight, offset)
    click.echo(
        f"✅ {asset.title}: weight={asset.frequency_weight} "
        f"offset={asset.sync_offset_ms}ms"
    )


@cli.group()
def key():
    """API key management."""
    pass


@key.command("create")
@owner_option
@data_dir_option
@_handle_errors
def key_create(owner, data_dir):
    """Create an API key for the embeddable player."""
    tracker = _build_tracker(data_dir)
    existing = tracker.key_for_owner(owner)
    if existing:
        click.echo(existing)
        return
    click.echo(tracker.create_credential(owner).credential_id)


@cli.group()
def embed():
    """Embed player access."""
    pass


@embed.command("songs")
@click.argument("api_key")
@data_dir_option
@_handle_errors
def embed_songs(api_key, data_dir):
    """List songs as the embeddable player sees them."""
    service = EmbedService(_build_tracker(data_dir), _build_workflow(data_dir))
    result = service.get_songs(api_key)
    click.echo(f"Owner: {result.owner_id}  Songs: {result.total}")
    for song in result.songs:
        click.echo(f"{song.artist} - {song.title}: {song.audio_url}")


@embed.command("check")
@click.argument("api_key")
@data_dir_option
@_handle_errors
def embed_check(api_key, data_dir):
    """Show when the owner's songs last changed."""
    service = EmbedService(_build_tracker(data_dir), _build_workflow(data_dir))
    result = service.check_changes(api_key)
    if result.last_update is None:
        click.echo("No songs")
    else:
        click.echo(f"Last update: {result.last_update.isoformat()}")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
