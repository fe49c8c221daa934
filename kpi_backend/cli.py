"""KPI API CLI tool (kpi-api)."""

import asyncio

import typer

from kpi_backend.core.config import settings

app = typer.Typer(name="kpi-api", help="KPI API CLI")
db_app = typer.Typer(help="Database commands")
app.add_typer(db_app, name="db")


@db_app.command("ping")
def db_ping():
    """Open the configured pool and run SELECT 1."""
    from kpi_backend.core.exceptions import BackendError
    from kpi_backend.db.session import build_engine, build_session_factory
    from kpi_backend.services.query_gateway import QueryGateway

    async def _ping() -> None:
        engine = build_engine(settings)
        try:
            await QueryGateway(build_session_factory(engine)).ping()
        finally:
            await engine.dispose()

    try:
        asyncio.run(_ping())
    except BackendError as e:
        typer.echo(f"❌ Database unreachable: {e.message}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"✅ Connected to {settings.PGDATABASE}")


@app.command("health")
def health(
    url: str = typer.Option(None, help="Base URL of a running API"),
):
    """Call /health on a running API."""
    import httpx
    base = url or f"http://localhost:{settings.PORT}"
    headers = {"x-api-key": settings.API_KEY} if settings.API_KEY else {}
    resp = httpx.get(f"{base.rstrip('/')}/health", headers=headers, timeout=10)
    typer.echo(resp.json())
    if resp.status_code != 200:
        raise typer.Exit(code=1)


@app.command("serve")
def serve(
    host: str = typer.Option(None, help="Host"),
    port: int = typer.Option(None, help="Port"),
    reload: bool = typer.Option(False, help="Auto-reload"),
):
    """Start the API server."""
    import uvicorn
    uvicorn.run(
        "kpi_backend.main:app",
        host=host or settings.HOST,
        port=port or settings.PORT,
        reload=reload,
    )


if __name__ == "__main__":
    app()
