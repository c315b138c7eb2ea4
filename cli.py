"""Domain Checker CLI: domain availability lookups from the command line.

Commands:
  search   Search a query and check every suggestion (optionally expanded)
  status   Check the status of specific domains
  shell    Interactive session (searches are cached for the session)
  health   Health check of the backend proxy
  serve    Run the backend proxy (uvicorn)

By default the CLI talks to the backend proxy and checks statuses one by one
with a pause in between. With --direct it calls the RapidAPI Domains API
itself (RAPIDAPI_KEY required) and checks statuses in parallel.
"""

import asyncio
import json
import logging
from typing import Optional

import click
import requests
from tqdm import tqdm

from engine.backend import BackendClient
from engine.config import Settings
from engine.errors import InvalidQueryError, LookupFailed
from engine.export import EXPORT_FORMATS, export_filename, purchase_links, render
from engine.models import DomainResult
from engine.orchestrator import StatusOrchestrator
from engine.session import SearchSession
from engine.status import count_by_summary, status_icon, status_label
from engine.upstream import DomainsApiClient
from store.cache import ResultCache


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )


def _build_client(settings: Settings, direct: bool):
    if direct:
        if not settings.rapidapi_key:
            raise click.UsageError("--direct needs RAPIDAPI_KEY in the environment or .env")
        return DomainsApiClient(
            settings.rapidapi_key,
            host=settings.rapidapi_host,
            timeout_seconds=settings.api_timeout,
            search_tlds=settings.search_tlds,
        )
    return BackendClient(settings.api_url, timeout_seconds=settings.api_timeout)


def _build_orchestrator(settings: Settings, direct: bool, parallel: Optional[bool] = None) -> StatusOrchestrator:
    client = _build_client(settings, direct)
    if parallel is None:
        parallel = direct
    return StatusOrchestrator(
        client.check_status,
        client.search,
        tlds=settings.tlds,
        strategy="parallel" if parallel else "sequential",
        delay=settings.check_delay,
    )


def _build_session(settings: Settings, direct: bool) -> SearchSession:
    cache = ResultCache(
        capacity=settings.cache_max_size,
        ttl=settings.cache_ttl,
        enabled=settings.cache_enabled,
    )
    return SearchSession(_build_orchestrator(settings, direct), cache)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool):
    """Domain Checker: search domain names and check their availability."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj.setdefault("settings", Settings.from_env())
    ctx.obj["verbose"] = verbose


@main.command()
@click.argument("query")
@click.option("--expand", is_flag=True, help="Also search the query across every configured TLD")
@click.option("--format", "fmt", type=click.Choice(["text", *EXPORT_FORMATS]), default="text")
@click.option("--output", "-o", type=click.Path(), help="Output file path")
@click.option("--direct", is_flag=True, help="Call the upstream API directly instead of the proxy")
@click.pass_obj
def search(obj: dict, query: str, expand: bool, fmt: str, output: Optional[str], direct: bool):
    """Search QUERY and check the availability of every suggestion."""
    session = _build_session(obj["settings"], direct)

    async def run():
        await session.search(query)
        if expand:
            await session.expand()
        return session.results

    try:
        results = asyncio.run(run())
    except (InvalidQueryError, LookupFailed) as e:
        raise click.ClickException(str(e))

    if not results:
        click.echo("No domains found for this query.")
        return

    _output_results(results, session.query, output, fmt)
    if fmt == "text":
        _print_summary(results)


@main.command()
@click.argument("domains", nargs=-1, required=True)
@click.option("--parallel", is_flag=True, help="Check all domains at once (failed lookups are dropped)")
@click.option("--direct", is_flag=True, help="Call the upstream API directly instead of the proxy")
@click.option("--json-output", is_flag=True, help="Output as JSON")
@click.pass_obj
def status(obj: dict, domains: tuple[str, ...], parallel: bool, direct: bool, json_output: bool):
    """Check the registration status of DOMAINS."""
    orchestrator = _build_orchestrator(obj["settings"], direct, parallel=parallel)

    pbar = tqdm(total=len(domains), desc="Checking", unit="domain", disable=json_output)

    def on_progress(result):
        pbar.update(1)

    results = asyncio.run(orchestrator.check(list(domains), progress_callback=on_progress))
    # dropped or duplicate lookups never report progress
    pbar.update(len(domains) - pbar.n)
    pbar.close()

    if json_output:
        click.echo(render(results, "json"))
        return

    for r in results:
        _print_result(r)
    skipped = len(set(domains)) - len(results)
    if parallel and skipped > 0:
        click.echo(f"\n{skipped} lookup(s) failed and were skipped.")
    _print_summary(results)


@main.command()
@click.option("--direct", is_flag=True, help="Call the upstream API directly instead of the proxy")
@click.pass_obj
def shell(obj: dict, direct: bool):
    """Interactive session. Type a query to search it.

    \b
    :expand                 expand the current query across all TLDs
    :export FORMAT [PATH]   export results (txt, csv, json)
    :cache                  show cache statistics
    :clear                  clear the cache
    :quit                   leave
    """
    session = _build_session(obj["settings"], direct)
    click.echo("Type a query, or :quit to leave.")

    while True:
        try:
            line = click.prompt("domaincheck", prompt_suffix="> ", default="", show_default=False)
        except (EOFError, click.Abort):
            click.echo()
            break

        line = line.strip()
        if not line:
            continue
        if line in (":quit", ":q", ":exit"):
            break

        try:
            _shell_command(session, line)
        except (InvalidQueryError, LookupFailed, ValueError) as e:
            click.echo(f"Error: {e}", err=True)


def _shell_command(session: SearchSession, line: str) -> None:
    if line == ":expand":
        before = len(session.results)
        results = asyncio.run(session.expand())
        _output_results(results, session.query, None, "text")
        click.echo(f"\n{len(results) - before} new domain(s) added.")
    elif line.startswith(":export"):
        parts = line.split()
        if len(parts) < 2 or parts[1] not in EXPORT_FORMATS:
            raise ValueError(f"usage: :export {{{','.join(EXPORT_FORMATS)}}} [PATH]")
        if not session.results:
            raise ValueError("nothing to export: search first")
        path = parts[2] if len(parts) > 2 else export_filename(session.query, parts[1])
        _output_results(session.results, session.query, path, parts[1])
    elif line == ":cache":
        click.echo(json.dumps(session.cache.stats(), indent=2))
    elif line == ":clear":
        session.cache.clear()
        click.echo("Cache cleared.")
    elif line.startswith(":"):
        raise ValueError(f"unknown command: {line}")
    else:
        results = asyncio.run(session.search(line))
        if not results:
            click.echo("No domains found for this query.")
            return
        _output_results(results, session.query, None, "text")
        _print_summary(results)


@main.command()
@click.option("--api-url", help="Backend base URL (default: DOMAINCHECK_API_URL)")
@click.pass_obj
def health(obj: dict, api_url: Optional[str]):
    """Check that the backend proxy is up."""
    settings: Settings = obj["settings"]
    url = (api_url or settings.api_url).rstrip("/")
    try:
        response = requests.get(f"{url}/health", timeout=settings.api_timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise click.ClickException(f"Backend at {url} is not healthy: {e}")
    click.echo(json.dumps(response.json(), indent=2))


@main.command()
@click.option("--host", default="0.0.0.0", help="Bind address")
@click.option("--port", type=int, help="Port (default: DOMAINCHECK_PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
@click.pass_obj
def serve(obj: dict, host: str, port: Optional[int], reload: bool):
    """Run the backend proxy."""
    import uvicorn

    settings: Settings = obj["settings"]
    if not settings.rapidapi_key:
        raise click.ClickException("RAPIDAPI_KEY is not defined. Create a .env file with your RapidAPI key.")

    logging.getLogger().setLevel(logging.DEBUG if settings.is_dev or obj["verbose"] else logging.INFO)
    uvicorn.run(
        "server:create_app",
        factory=True,
        host=host,
        port=port or settings.port,
        reload=reload,
    )


def _print_result(result: DomainResult):
    """Pretty-print a single domain result."""
    line = f"{status_icon(result.summary)} {result.domain} [{status_label(result.summary)}]"
    if result.error:
        line += f" ({result.error})"
    click.echo(line)


def _output_results(results: list[DomainResult], query: str, output_path: Optional[str], fmt: str):
    """Write results to a file or stdout."""
    if fmt == "text":
        for r in results:
            _print_result(r)
            if r.is_available:
                for engine, link in purchase_links(r.domain).items():
                    click.echo(f"    {engine}: {link}")
        return

    text = render(results, fmt, query)
    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text)
        click.echo(f"Results written to {output_path}")
    else:
        click.echo(text)


def _print_summary(results: list[DomainResult]):
    """Print a summary of checked domains by availability bucket."""
    total = len(results)
    counts = count_by_summary(results)

    click.echo(f"\nSummary ({total} domains):")
    for summary in ["available", "unavailable", "unknown"]:
        count = counts.get(summary, 0)
        pct = (count / total * 100) if total > 0 else 0
        click.echo(f"  {summary}: {count} ({pct:.1f}%)")


if __name__ == "__main__":
    main()
