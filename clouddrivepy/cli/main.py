"""CloudDrive CLI - Main commands."""
import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table

from clouddrivepy.core.exceptions import CloudDriveAuthError, CloudDriveException

app = typer.Typer(
    name="clouddrive",
    help="CloudDrive aggregation server CLI",
    add_completion=False
)
console = Console()

T = TypeVar('T')


@dataclass
class CLIState:
    """Connection options shared by every command."""
    server: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    verbose: bool = False


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def split_paths(value: Optional[str]) -> List[str]:
    """Split a comma-separated path list, dropping blanks."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def configure_logging(verbose: bool) -> None:
    from clouddrivepy import setup_logging

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    setup_logging(level)


def with_client(
    state: CLIState,
    action: Callable[..., Awaitable[T]],
    failure: str
) -> T:
    """
    Connect, run one action against the client, and always disconnect.

    Errors print a message and exit with status 1.
    """
    from clouddrivepy import CloudDriveClient

    if not state.server:
        console.print("[red]No server given. Use --server or CLOUDDRIVE_SERVER.[/red]")
        raise typer.Exit(1)

    username = state.username or typer.prompt("Username")
    password = state.password or typer.prompt("Password", hide_input=True)

    async def run():
        client = CloudDriveClient(state.server, username, password)
        try:
            if state.verbose:
                console.print("Logging in to CloudDrive...")
            await client.connect()
            if state.verbose:
                console.print("[green]Logged in[/green]")
            return await action(client)
        finally:
            await client.close()

    start = time.monotonic()
    try:
        return run_async(run())
    except CloudDriveAuthError as e:
        console.print(f"[red]Login failed: {e}[/red]")
        raise typer.Exit(1)
    except (CloudDriveException, OSError, ValueError) as e:
        console.print(f"[red]{failure}: {e}[/red]")
        raise typer.Exit(1)
    finally:
        if state.verbose:
            console.print(f"[dim]Total time: {time.monotonic() - start:.2f}s[/dim]")


@app.callback()
def main_options(
    ctx: typer.Context,
    server: str = typer.Option(
        None, "--server", "-s", envvar="CLOUDDRIVE_SERVER",
        help="Server address, 'host:port' or 'http(s)://host:port'"
    ),
    username: str = typer.Option(None, "--username", "-u", envvar="CLOUDDRIVE_USERNAME", help="User name"),
    password: str = typer.Option(None, "--password", "-p", envvar="CLOUDDRIVE_PASSWORD", help="Password"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """Manage a CloudDrive server: list, refresh, upload and offline downloads."""
    configure_logging(verbose)
    ctx.obj = CLIState(server=server, username=username, password=password, verbose=verbose)


@app.command("list")
def list_clouds(ctx: typer.Context):
    """List cloud storages."""
    state: CLIState = ctx.obj

    async def do_list(client):
        backends = await client.list_clouds()
        console.print(f"Found {len(backends)} cloud storage(s):")

        table = Table()
        table.add_column("#", justify="right", style="dim")
        table.add_column("Name", style="cyan")
        table.add_column("User")
        table.add_column("Path", style="dim")
        for index, backend in enumerate(backends, 1):
            table.add_row(str(index), backend.name, backend.user_name, backend.path)
        console.print(table)

    with_client(state, do_list, "Failed to list cloud storages")


@app.command("refresh-all")
def refresh_all(
    ctx: typer.Context,
    exclude: str = typer.Option(
        None, "--exclude", "-e",
        help="Comma-separated directories to skip, e.g. '/tmp,/temp'"
    ),
):
    """Refresh every directory of every cloud storage."""
    state: CLIState = ctx.obj
    exclusions = split_paths(exclude)
    if exclusions and state.verbose:
        console.print(f"Excluded directories: {', '.join(exclusions)}")

    async def do_refresh(client):
        console.print("Refreshing all directories...")
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True
        ) as progress:
            task = progress.add_task("Starting", total=None)

            def on_refreshed(outcome):
                progress.update(task, description=f"{outcome.path} ({outcome.child_count} entries)")

            def on_failed(outcome, error):
                progress.console.print(f"[red]Failed: {outcome.path}: {error}[/red]")

            client.on('directory_refreshed', on_refreshed)
            client.on('directory_failed', on_failed)
            results = await client.refresh_all(exclusions)

        failed = 0
        for backend, report in results:
            style = "green" if report.ok else "yellow"
            console.print(f"[{style}]{backend.name}:[/{style}] {report.summary()}")
            failed += len(report.failed)

        if failed:
            console.print(f"[yellow]Refresh finished with {failed} failed directories[/yellow]")
        else:
            console.print("[green]All directories refreshed![/green]")

    with_client(state, do_refresh, "Failed to refresh directories")


@app.command("refresh-dir")
def refresh_dir(
    ctx: typer.Context,
    path: str = typer.Option(..., "--path", help="Directory to refresh; comma-separated for several"),
):
    """Refresh specific directories (not recursive)."""
    state: CLIState = ctx.obj
    paths = split_paths(path)
    if not paths:
        console.print("[red]No directory given. Use --path, comma-separated for several.[/red]")
        raise typer.Exit(1)

    async def do_refresh(client):
        results = await client.refresh_directories(paths)
        failures = 0
        for directory, result in results.items():
            if isinstance(result, Exception):
                failures += 1
                console.print(f"[red]Failed to refresh {directory}: {result}[/red]")
            else:
                console.print(f"[green]Refreshed {directory}[/green] ({result} entries)")
        return failures

    failures = with_client(state, do_refresh, "Failed to refresh directories")
    # A single target is a single-shot command
    if failures and len(paths) == 1:
        raise typer.Exit(1)


@app.command("list-dir")
def list_dir(
    ctx: typer.Context,
    path: str = typer.Option("/", "--path", help="Directory to list"),
    refresh: bool = typer.Option(True, "--refresh/--no-refresh", help="Bypass the server cache"),
):
    """List the contents of a directory."""
    state: CLIState = ctx.obj

    async def do_list(client):
        entries = await client.list_directory(path, force_refresh=refresh)
        console.print(f"Directory {path} contains {len(entries)} entries:")

        table = Table()
        table.add_column("#", justify="right", style="dim")
        table.add_column("Type", style="cyan")
        table.add_column("Size", justify="right")
        table.add_column("Name")
        for index, entry in enumerate(entries, 1):
            type_str = "D" if entry.is_directory else "F"
            size_str = "-" if entry.is_directory else f"{entry.size:,}"
            name = f"[blue]{entry.name}/[/blue]" if entry.is_directory else entry.name
            table.add_row(str(index), type_str, size_str, name)
        console.print(table)

    with_client(state, do_list, "Failed to list directory")


@app.command()
def upload(
    ctx: typer.Context,
    file_path: Path = typer.Argument(..., help="Local file to upload", exists=True, dir_okay=False),
    dest: str = typer.Option(None, "--dest", "-d", help="Destination folder (default: upload folder)"),
    name: str = typer.Option(None, "--name", "-n", help="Custom file name"),
):
    """Upload a file."""
    from clouddrivepy.core.upload.models import UploadProgress

    state: CLIState = ctx.obj

    async def do_upload(client):
        target = dest or client.upload_folder
        console.print(f"Uploading {file_path} to {target}")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console
        ) as progress:
            task = progress.add_task(f"Uploading {file_path.name}", total=100)

            def on_progress(p: UploadProgress):
                progress.update(task, completed=p.percentage)

            result = await client.upload(file_path, name=name, dest=target, progress_callback=on_progress)
            progress.update(task, completed=100)

        console.print(f"[green]Uploaded:[/green] {result.remote_path}")
        console.print(f"Size: {result.bytes_written:,} bytes in {result.chunks} chunk(s)")

    with_client(state, do_upload, "Upload failed")


@app.command("offline-add")
def offline_add(
    ctx: typer.Context,
    urls: List[str] = typer.Argument(..., help="URLs to download (http, magnet, ed2k)"),
    to: str = typer.Option(None, "--to", "-t", help="Target folder (default: offline folder)"),
):
    """Add offline downloads."""
    state: CLIState = ctx.obj

    async def do_add(client):
        paths = await client.add_offline_files(urls, to)
        console.print(f"[green]Submitted {len(urls)} offline download(s)[/green]")
        for remote_path in paths:
            console.print(f"  {remote_path}")

    with_client(state, do_add, "Failed to add offline downloads")


@app.command("offline-list")
def offline_list(
    ctx: typer.Context,
    cloud: str = typer.Argument(..., help="Cloud storage name"),
    account: str = typer.Argument(..., help="Account on that cloud storage"),
    page: int = typer.Option(0, "--page", min=0, help="Page number, starting at 0"),
):
    """List offline downloads of a cloud account."""
    state: CLIState = ctx.obj

    async def do_list(client):
        result = await client.list_offline_files(cloud, account, page)

        table = Table(title=f"Page {result.page_no + 1}/{max(result.page_count, 1)} ({result.total_count} total)")
        table.add_column("Name")
        table.add_column("Status", style="cyan")
        table.add_column("Progress", justify="right")
        table.add_column("Size", justify="right")
        for item in result.files:
            table.add_row(
                item.name,
                item.status.name.lower(),
                f"{item.percent_done:.1f}%",
                f"{item.size:,}" if item.size else "-",
            )
        console.print(table)

    with_client(state, do_list, "Failed to list offline downloads")


@app.command("login-115")
def login_115(
    ctx: typer.Context,
    cookie: str = typer.Option(None, "--cookie", help="EditThisCookie export of a 115 session"),
    qrcode: bool = typer.Option(False, "--qrcode", help="Start a QR code login instead"),
    platform: str = typer.Option(None, "--platform", help="115 platform for the QR code login"),
):
    """Add a 115 account to the server."""
    state: CLIState = ctx.obj
    if bool(cookie) == qrcode:
        console.print("[red]Give either --cookie or --qrcode.[/red]")
        raise typer.Exit(1)

    async def do_login(client):
        if cookie:
            await client.login_115_with_cookie(cookie)
            console.print("[green]115 account added[/green]")
        else:
            content = await client.get_115_qrcode(platform)
            console.print("Scan this QR code with the 115 app:")
            console.print(content, markup=False)

    with_client(state, do_login, "115 login failed")


@app.command()
def info(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Remote path"),
):
    """Show details of a remote file or folder."""
    state: CLIState = ctx.obj

    async def show_info(client):
        entry = await client.find_file(path)

        console.print(f"[bold]Name:[/bold] {entry.name}")
        console.print(f"[bold]Path:[/bold] {entry.full_path}")
        console.print(f"[bold]Type:[/bold] {'Folder' if entry.is_directory else 'File'}")
        if entry.is_file:
            console.print(f"[bold]Size:[/bold] {entry.size:,} bytes")
        if entry.write_time:
            console.print(f"[bold]Modified:[/bold] {entry.write_time:%Y-%m-%d %H:%M:%S}")
        if entry.cloud:
            console.print(f"[bold]Cloud:[/bold] {entry.cloud}")

    with_client(state, show_info, "Failed to get info")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
