from __future__ import annotations
import json
import typer
import httpx
from rich import print
from rich.table import Table

app = typer.Typer(help="Conduit CLI - send payloads through a tenant's channels and inspect conversations.")

def _http_url(host: str, port: int, path: str) -> str:
    return f"http://{host}:{port}{path}"

def _fail(res: httpx.Response) -> None:
    print(f"[red]{res.status_code}[/red] {res.text}")
    raise typer.Exit(code=1)

@app.command()
def serve():
    """Run the webhook and API server."""
    from conduit.__main__ import main as run_server
    run_server()

@app.command()
def health(host: str = "127.0.0.1", port: int = 3100):
    """Check that the server is up."""
    res = httpx.get(_http_url(host, port, "/healthz"), timeout=5.0)
    if res.status_code != 200:
        _fail(res)
    print(res.json())

@app.command()
def send(
    conversation_id: str,
    text: str = typer.Option("", help="Shortcut for a text payload."),
    payload_json: str = typer.Option("", "--payload", help="Full payload as JSON; wins over --text."),
    channel: str = "slack",
    typing: bool = False,
    host: str = "127.0.0.1",
    port: int = 3100,
    api_key: str = typer.Option("", envvar="CONDUIT_API_KEY"),
):
    """Send a payload to a conversation."""
    if payload_json:
        try:
            payload = json.loads(payload_json)
        except json.JSONDecodeError as e:
            print(f"[red]--payload is not valid JSON:[/red] {e}")
            raise typer.Exit(code=2)
        if not isinstance(payload, dict):
            print("[red]--payload must be a JSON object[/red]")
            raise typer.Exit(code=2)
    elif text:
        payload = {"type": "text", "text": text}
    else:
        print("[red]either --text or --payload is required[/red]")
        raise typer.Exit(code=2)
    if typing:
        payload["typing"] = True

    res = httpx.post(
        _http_url(host, port, "/api/send"),
        headers={"x-api-key": api_key},
        json={"channel": channel, "conversation_id": conversation_id, "payload": payload},
        timeout=30.0,
    )
    if res.status_code != 200:
        _fail(res)
    print("[green]sent[/green]")

@app.command()
def messages(
    conversation_id: str,
    limit: int = 20,
    host: str = "127.0.0.1",
    port: int = 3100,
    api_key: str = typer.Option("", envvar="CONDUIT_API_KEY"),
):
    """List the latest messages of a conversation."""
    res = httpx.get(
        _http_url(host, port, f"/api/conversations/{conversation_id}/messages"),
        headers={"x-api-key": api_key},
        params={"limit": limit},
        timeout=10.0,
    )
    if res.status_code != 200:
        _fail(res)
    t = Table(title=f"Messages of {conversation_id}")
    t.add_column("sent_on"); t.add_column("author"); t.add_column("type"); t.add_column("text"); t.add_column("feedback")
    for m in res.json().get("messages", []):
        payload = m.get("payload", {})
        t.add_row(m["sent_on"], str(m.get("author_id") or "bot"), str(payload.get("type")),
                  str(payload.get("text", "")), str(m.get("feedback") if m.get("feedback") is not None else ""))
    print(t)

def main():
    """Entry point for the CLI."""
    app()
