"""
Command-line interface for Gofile SDK.

This module provides the ``gofile`` command for working with a Gofile
account from the terminal. The token comes from ``--token`` or the
GOFILE_TOKEN environment variable; nothing is written to disk.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.panel import Panel

from .client import GofileClient, DEFAULT_ENDPOINT
from .exceptions import GofileError
from .models import Content, File, ContentOption, OptionName, UploadProgress, DownloadProgress
from .utils import format_file_size


# Initialize Rich console
console = Console()


class CLIContext:
    """CLI context object to share state between commands."""

    def __init__(self, token: Optional[str], endpoint: str, zone: Optional[str]):
        self.token = token
        self.endpoint = endpoint
        self.zone = zone
        self.client: Optional[GofileClient] = None

    def get_client(self) -> GofileClient:
        """Get the (possibly guest) client."""
        if self.client is None:
            self.client = GofileClient(
                token=self.token,
                endpoint=self.endpoint,
                zone=self.zone,
            )
        return self.client


def fail(message: str):
    console.print(f"❌ {message}")
    sys.exit(1)


def render_content(content: Content) -> None:
    if isinstance(content, File):
        table = Table(title=f"File: {content.name}")
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("ID", str(content.id))
        table.add_row("Parent", str(content.parent_folder))
        table.add_row("Size", format_file_size(content.size))
        table.add_row("MIME Type", content.mimetype)
        table.add_row("MD5", content.md5_hex)
        table.add_row("Downloads", str(content.download_count))
        table.add_row("Created", content.create_time.strftime('%Y-%m-%d %H:%M:%S'))
        table.add_row("Link", content.link)
        console.print(table)
        return

    summary = [f"ID: {content.id}", f"Code: {content.code}", f"Public: {'Yes' if content.public else 'No'}"]
    if content.total_size is not None:
        summary.append(f"Total size: {format_file_size(content.total_size)}")
    if content.total_download_count is not None:
        summary.append(f"Total downloads: {content.total_download_count}")
    console.print(Panel("\n".join(summary), title=f"Folder: {content.name}", border_style="green"))

    children = content.children()
    if not children:
        console.print("Folder is empty." if not content.children_ids else f"{len(content.children_ids)} child item(s).")
        return

    table = Table(title="Contents")
    table.add_column("Name", style="green")
    table.add_column("Type", style="blue")
    table.add_column("Size", style="yellow")
    table.add_column("ID", style="cyan")
    for child in children:
        size = format_file_size(child.size) if isinstance(child, File) else "-"
        table.add_row(child.name, child.TYPE, size, str(child.id))
    console.print(table)


@click.group()
@click.option('--token', envvar='GOFILE_TOKEN', help='Account token (or GOFILE_TOKEN env var)')
@click.option('--endpoint', default=DEFAULT_ENDPOINT, show_default=True, help='Gofile API endpoint')
@click.option('--zone', default='eu', show_default=True, help="Preferred upload server zone ('any' for no preference)")
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, token, endpoint, zone, debug):
    """Gofile CLI - manage a Gofile account from the terminal."""
    ctx.obj = CLIContext(token, endpoint, None if zone == 'any' else zone)

    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )
        console.print("[dim]Debug mode enabled[/dim]")


@cli.command()
@click.pass_obj
def server(obj: CLIContext):
    """List upload servers and show which one would be used."""
    try:
        client = obj.get_client()
        servers = client.get_servers()
    except GofileError as e:
        fail(f"Failed to list servers: {e}")

    table = Table(title="Upload Servers")
    table.add_column("Name", style="cyan")
    table.add_column("Zone", style="green")
    table.add_column("Preferred", style="magenta")

    preferred = next((s for s in servers if obj.zone is None or s.zone == obj.zone), None)
    for item in servers:
        table.add_row(item.name, item.zone, "✓" if item is preferred else "")
    console.print(table)


@cli.command()
@click.pass_obj
def account(obj: CLIContext):
    """Show account details."""
    try:
        client = obj.get_client()
        details = client.get_account_details()
    except GofileError as e:
        fail(f"Failed to get account details: {e}")

    table = Table(title="Account")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("ID", str(details.id))
    table.add_row("Email", details.email)
    table.add_row("Tier", details.tier)
    table.add_row("Token", client.auth.mask())
    table.add_row("Root Folder", str(details.root_folder))
    table.add_row("Files", str(details.files_count))
    table.add_row("Total Size", format_file_size(details.total_size))
    console.print(table)


@cli.command()
@click.argument('files', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option('--folder', help='Destination folder id')
@click.pass_obj
def upload(obj: CLIContext, files, folder):
    """Upload files to Gofile."""

    try:
        client = obj.get_client()
        target = client.get_server()

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console
        ) as progress:

            for file_path in files:
                file_path = Path(file_path)
                task = progress.add_task(f"Uploading {file_path.name}", total=100)

                def progress_callback(prog: UploadProgress, task=task):
                    progress.update(task, completed=prog.percentage)

                uploaded = client.upload_file(
                    file_path,
                    folder_id=folder,
                    server=target,
                    progress_callback=progress_callback,
                )

                progress.update(task, completed=100)
                console.print(f"✅ Uploaded: {uploaded.file_name} (ID: {uploaded.file_id})")
                console.print(f"   {uploaded.download_page}")

                # a guest upload creates a folder; keep the rest of the batch in it
                if folder is None:
                    folder = str(uploaded.parent_folder)
                if uploaded.guest_token and client.auth.token is None:
                    client.auth.token = uploaded.guest_token
                    console.print(f"   Guest token: {uploaded.guest_token}")

    except GofileError as e:
        fail(f"Upload failed: {e}")


@cli.command()
@click.argument('parent_id')
@click.argument('name')
@click.pass_obj
def mkdir(obj: CLIContext, parent_id, name):
    """Create folder NAME under PARENT_ID."""
    try:
        folder = obj.get_client().create_folder(parent_id, name)
    except GofileError as e:
        fail(f"Failed to create folder: {e}")
    console.print(f"✅ Created folder: {folder.name} (ID: {folder.id})")


@cli.command()
@click.argument('content')
@click.option('--json', 'output_json', is_flag=True, help='Output as JSON')
@click.pass_obj
def content(obj: CLIContext, content, output_json):
    """Show a folder or file, by id, code or https://gofile.io/d/<code> URL."""
    try:
        client = obj.get_client()
        if content.startswith(("http://", "https://")):
            fetched = client.get_content_from_url(content)
        else:
            fetched = client.get_content(content)
    except GofileError as e:
        fail(f"Failed to get content: {e}")

    if output_json:
        click.echo(json.dumps(fetched.to_dict(), indent=2))
    else:
        render_content(fetched)


@cli.command(name='set-option')
@click.argument('content_id')
@click.argument('option', type=click.Choice([o.value for o in OptionName]))
@click.argument('value')
@click.pass_obj
def set_option(obj: CLIContext, content_id, option, value):
    """Set OPTION of CONTENT_ID to VALUE."""
    try:
        parsed = ContentOption.parse(option, value)
        obj.get_client().set_option(content_id, parsed)
    except GofileError as e:
        fail(f"Failed to set option: {e}")
    console.print(f"✅ {option} updated on {content_id}")


@cli.command()
@click.argument('content_ids', nargs=-1, required=True)
@click.option('--to', 'dest', required=True, help='Destination folder id')
@click.pass_obj
def copy(obj: CLIContext, content_ids, dest):
    """Copy contents into another folder."""
    try:
        obj.get_client().copy_content(content_ids, dest)
    except GofileError as e:
        fail(f"Copy failed: {e}")
    console.print(f"✅ Copied {len(content_ids)} item(s) to {dest}")


@cli.command()
@click.argument('content_ids', nargs=-1, required=True)
@click.confirmation_option(prompt='Are you sure you want to delete these contents?')
@click.pass_obj
def delete(obj: CLIContext, content_ids):
    """Delete contents."""
    try:
        obj.get_client().delete_content(content_ids)
    except GofileError as e:
        fail(f"Delete failed: {e}")
    console.print(f"✅ Deleted {len(content_ids)} item(s)")


@cli.command()
@click.argument('content_id')
@click.pass_obj
def link(obj: CLIContext, content_id):
    """Enable and print the direct link of a file."""
    try:
        direct_link = obj.get_client().get_direct_link(content_id)
    except GofileError as e:
        fail(f"Failed to get direct link: {e}")
    click.echo(direct_link)


@cli.command()
@click.argument('content_id')
@click.pass_obj
def unlink(obj: CLIContext, content_id):
    """Disable the direct link of a file."""
    try:
        obj.get_client().disable_direct_link(content_id)
    except GofileError as e:
        fail(f"Failed to disable direct link: {e}")
    console.print(f"✅ Direct link disabled for {content_id}")


@cli.command()
@click.argument('content_id')
@click.option('--output', '-o', type=click.Path(), help='Output file path')
@click.pass_obj
def download(obj: CLIContext, content_id, output):
    """Download a file."""
    try:
        client = obj.get_client()
        target = client.get_content(content_id)
        if not isinstance(target, File):
            fail(f"{content_id} is a folder; only files can be downloaded")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console
        ) as progress:
            task = progress.add_task(f"Downloading {target.name}", total=100)

            def progress_callback(prog: DownloadProgress):
                progress.update(task, completed=prog.percentage)

            local_path = client.download_file(target, output, progress_callback=progress_callback)
            progress.update(task, completed=100)

    except (GofileError, OSError) as e:
        fail(f"Download failed: {e}")
    console.print(f"✅ Downloaded: {local_path}")


if __name__ == '__main__':
    cli()
