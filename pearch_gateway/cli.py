"""
Pearch CLI - submit searches, check task status and run batches from a file.
"""
import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich import box
from rich.markup import escape
from pydantic import ValidationError

from pearch_gateway.api.schemas import BatchItem, Operation
from pearch_gateway.errors import PearchError
from pearch_gateway.services.batch import BatchRunner
from pearch_gateway.services.credentials import credential_provider
from pearch_gateway.services.poller import TaskPoller
from pearch_gateway.services.request_builder import build_search_request
from pearch_gateway.services.transport import transport

app = typer.Typer(
    name="pearch",
    help="Pearch search - submit and poll search tasks",
    add_completion=False
)
console = Console()


def _search_parameters(query, limit, search_type, insights, high_freshness,
                       show_emails, show_phone_numbers, profile_scoring) -> dict:
    return {
        "query": query,
        "limit": limit,
        "type": search_type,
        "insights": insights,
        "high_freshness": high_freshness,
        "show_emails": show_emails,
        "show_phone_numbers": show_phone_numbers,
        "profile_scoring": profile_scoring,
    }


def _run(coro):
    try:
        return asyncio.run(coro)
    except PearchError as e:
        console.print(f"[red]{type(e).__name__}:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def _print_json(data) -> None:
    console.print_json(json.dumps(data))


@app.command()
def submit(
    query: str = typer.Argument(..., help="Search query"),
    limit: int = typer.Option(50, "--limit", "-n", help="Max number of results"),
    search_type: Optional[str] = typer.Option(None, "--type", "-t", help="fast or pro"),
    insights: bool = typer.Option(False, help="Include insights"),
    high_freshness: bool = typer.Option(False, help="Prioritize high freshness results"),
    show_emails: bool = typer.Option(False, help="Include email addresses"),
    show_phone_numbers: bool = typer.Option(False, help="Include phone numbers"),
    profile_scoring: bool = typer.Option(False, help="Include profile scoring"),
):
    """Submit a search task for background execution."""
    parameters = _search_parameters(query, limit, search_type, insights, high_freshness,
                                    show_emails, show_phone_numbers, profile_scoring)

    async def _submit():
        request = build_search_request(parameters)
        poller = TaskPoller(transport, credential_provider.resolve())
        return await poller.submit(request.to_body())

    _print_json(_run(_submit()))


@app.command()
def status(task_id: str = typer.Argument(..., help="Task ID returned by submit")):
    """Get the status of a submitted search task."""
    async def _status():
        poller = TaskPoller(transport, credential_provider.resolve())
        return await poller.get_status(task_id)

    _print_json(_run(_status()))


@app.command()
def wait(
    query: str = typer.Argument(..., help="Search query"),
    limit: int = typer.Option(50, "--limit", "-n", help="Max number of results"),
    search_type: Optional[str] = typer.Option(None, "--type", "-t", help="fast or pro"),
    insights: bool = typer.Option(False, help="Include insights"),
    high_freshness: bool = typer.Option(False, help="Prioritize high freshness results"),
    show_emails: bool = typer.Option(False, help="Include email addresses"),
    show_phone_numbers: bool = typer.Option(False, help="Include phone numbers"),
    profile_scoring: bool = typer.Option(False, help="Include profile scoring"),
    max_wait: int = typer.Option(600, "--max-wait", help="Maximum wait time (10-3600 seconds)"),
    interval: int = typer.Option(15, "--interval", help="Polling interval (2-60 seconds)"),
):
    """Submit a search task and poll until it completes, fails or times out."""
    parameters = _search_parameters(query, limit, search_type, insights, high_freshness,
                                    show_emails, show_phone_numbers, profile_scoring)
    parameters.update({"maxWaitTime": max_wait, "pollingInterval": interval})
    item = BatchItem(parameters=parameters)

    async def _wait():
        runner = BatchRunner(transport, credential_provider)
        results = await runner.run([item], Operation.SUBMIT_AND_WAIT)
        return results[0].json_

    with console.status(f"[cyan]Waiting for search: {escape(query)}[/cyan]"):
        result = _run(_wait())
    _print_json(result)


@app.command()
def batch(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file with a list of items"),
    operation: Operation = typer.Option(Operation.SUBMIT_AND_WAIT, "--operation", "-o", help="Operation to run per item"),
    continue_on_fail: bool = typer.Option(False, "--continue-on-fail", help="Keep going when an item fails"),
    output: Optional[Path] = typer.Option(None, "--output", help="Write results JSON here"),
):
    """Run an operation over every item in a JSON file, one item at a time."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw_items = json.load(f)
    except json.JSONDecodeError as e:
        console.print(f"[red]Batch file is not valid JSON:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if not isinstance(raw_items, list):
        console.print("[red]Batch file must contain a JSON list of items.[/red]")
        raise typer.Exit(1)

    try:
        items = [BatchItem.model_validate(raw) for raw in raw_items]
    except ValidationError as e:
        console.print(f"[red]Batch file contains an invalid item:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f"\n[bold cyan]Running {operation.value} for {len(items)} items[/bold cyan]\n")

    runner = BatchRunner(transport, credential_provider)
    results = _run(runner.run(items, operation, continue_on_fail))

    table = Table(title="Batch Results", box=box.ROUNDED)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Outcome")
    table.add_column("Detail", overflow="fold")

    for result in results:
        if result.error:
            table.add_row(str(result.paired_item), "[red]error[/red]", escape(result.error["message"]))
        else:
            detail = result.json_.get("status") or result.json_.get("task_id") or ""
            table.add_row(str(result.paired_item), "[green]ok[/green]", escape(str(detail)))

    console.print(table)

    failed = sum(1 for r in results if r.error)
    console.print(f"\nSucceeded: {len(results) - failed}/{len(results)}")

    if output:
        with open(output, "w", encoding="utf-8") as f:
            json.dump([r.model_dump(by_alias=True) for r in results], f, indent=2)
        console.print(f"Results saved to {output}")


if __name__ == "__main__":
    app()
