"""Command-line interface for httpdispatch using Click."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from tqdm import tqdm

from httpdispatch import __version__
from httpdispatch.config import Settings
from httpdispatch.errors import DispatchError
from httpdispatch.http.certificates import WorkspaceContext
from httpdispatch.http.client import HttpClient
from httpdispatch.http.cookies import FileCookieStore
from httpdispatch.http.headers import HeaderMap, load_headers_from_file, parse_header_line
from httpdispatch.models import HttpRequest, HttpResponse


# Setup logging - default to WARNING to avoid interfering with progress bars
# INFO and DEBUG logs are only shown when --verbose is used
logging.basicConfig(
    level=logging.WARNING,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@click.group(invoke_without_command=True)
@click.option('--version', '-v', is_flag=True, help='Show version and exit')
@click.pass_context
def cli(ctx, version):
    """httpdispatch - Send authored HTTP requests.

    Sends a request with the authentication, proxy, certificate and cookie
    handling of the request-authoring tool, and prints the decoded response.
    """
    if version:
        click.echo(f"httpdispatch version {__version__}")
        ctx.exit()

    # If no subcommand, show help
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def _build_settings(
    settings_file: Optional[str],
    timeout: Optional[int],
    no_follow: bool,
    proxy: Optional[str],
    exclude_host: Tuple[str, ...],
    proxy_strict_ssl: bool,
    no_cookies: bool,
    decode_unicode: bool,
) -> Settings:
    """Load settings from file and apply command-line overrides."""
    settings = Settings.from_file(settings_file) if settings_file else Settings()

    if timeout is not None:
        settings.timeout_ms = timeout
    if no_follow:
        settings.follow_redirect = False
    if proxy:
        settings.proxy = proxy
    if exclude_host:
        settings.exclude_hosts_for_proxy = list(exclude_host)
    if proxy_strict_ssl:
        settings.proxy_strict_ssl = True
    if no_cookies:
        settings.remember_cookies_for_subsequent_requests = False
    if decode_unicode:
        settings.decode_escaped_unicode_characters = True

    return settings


def _print_head(response: HttpResponse) -> None:
    click.echo(f"HTTP/{response.http_version} {response.status_code} {response.status_message}")
    for name, value in response.headers.items():
        click.echo(f"{name}: {value}")
    click.echo()


async def _send(client: HttpClient, request: HttpRequest, settings: Settings, include: bool, progress: bool):
    pbar = None
    if progress:
        pbar = tqdm(desc="Receiving", unit="B", unit_scale=True, file=sys.stderr)

    try:
        response = await client.send(request, settings, on_progress=pbar.update if pbar else None)

        if include:
            _print_head(response)

        # Event streams resolve early; echo the body as it keeps arriving
        printed = 0
        while True:
            click.echo(response.body[printed:], nl=False)
            printed = len(response.body)
            if response.finished:
                break
            await asyncio.sleep(0.1)
        click.echo(response.body[printed:])
    finally:
        if pbar:
            pbar.close()

    return response


@cli.command()
@click.argument('url')
@click.option('--method', '-X', default='GET', help='HTTP method (default: GET)')
@click.option('--header', '-H', multiple=True, help='Request header "Name: value" (repeatable)')
@click.option('--header-file', help='Path to header file')
@click.option('--data', '-d', help='Request body; @path reads it from a file')
@click.option('--name', help='Request name')
@click.option('--settings', 'settings_file', type=click.Path(exists=True), help='JSON settings file')
@click.option('--timeout', type=int, help='Request timeout in milliseconds (0 disables)')
@click.option('--no-follow', is_flag=True, help='Do not follow redirects')
@click.option('--proxy', help='HTTP/HTTPS proxy')
@click.option('--exclude-host', multiple=True, help='Host or host:port that bypasses the proxy (repeatable)')
@click.option('--proxy-strict-ssl', is_flag=True, help='Verify the proxy TLS certificate')
@click.option('--no-cookies', is_flag=True, help='Do not use or remember cookies')
@click.option('--decode-unicode', is_flag=True, help=r'Decode \uXXXX escapes in the response body')
@click.option('--workspace', type=click.Path(file_okay=False), help='Root for relative certificate paths')
@click.option('--include', '-i', is_flag=True, help='Print status line and response headers')
@click.option('--progress', is_flag=True, help='Show received bytes')
@click.option('--verbose', is_flag=True, help='Enable verbose logging')
def send(
    url: str,
    method: str,
    header: Tuple[str, ...],
    header_file: Optional[str],
    data: Optional[str],
    name: Optional[str],
    settings_file: Optional[str],
    timeout: Optional[int],
    no_follow: bool,
    proxy: Optional[str],
    exclude_host: Tuple[str, ...],
    proxy_strict_ssl: bool,
    no_cookies: bool,
    decode_unicode: bool,
    workspace: Optional[str],
    include: bool,
    progress: bool,
    verbose: bool,
):
    """Send a request to URL and print the response body.

    Example:
        httpdispatch send https://api.example.com/items -H "Authorization: Basic alice:secret" -i
    """
    # Enable verbose logging if requested
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        # Also enable httpx logging
        logging.getLogger('httpx').setLevel(logging.INFO)

    try:
        settings = _build_settings(
            settings_file, timeout, no_follow, proxy, exclude_host,
            proxy_strict_ssl, no_cookies, decode_unicode,
        )
        headers = HeaderMap(load_headers_from_file(header_file) if header_file else None)
        for line in header:
            header_name, value = parse_header_line(line)
            headers[header_name] = value
    except (DispatchError, ValueError) as e:
        raise click.BadParameter(str(e))

    body = data
    if data and data.startswith('@'):
        try:
            body = Path(data[1:]).read_bytes()
        except OSError as e:
            raise click.BadParameter(f"Cannot read {data[1:]}: {e.strerror}", param_hint="'--data'")

    request = HttpRequest(method, url, headers, body=body, raw_body=data, name=name)
    client = HttpClient(
        FileCookieStore(str(Settings.get_cookie_file())),
        workspace=WorkspaceContext(root_path=workspace) if workspace else None,
    )

    try:
        asyncio.run(_send(client, request, settings, include, progress))
    except DispatchError as e:
        click.echo(f"✗ Failed: {e}", err=True)
        sys.exit(1)


@cli.command('clear-cookies')
def clear_cookies():
    """Delete all remembered cookies."""
    client = HttpClient(FileCookieStore(str(Settings.get_cookie_file())))
    asyncio.run(client.clear_cookies())
    click.echo("✓ Cookies cleared")


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == '__main__':
    main()
