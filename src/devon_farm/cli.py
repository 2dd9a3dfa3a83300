import subprocess
import sys
from pathlib import Path

import typer
import uvicorn

app = typer.Typer(help="Devon Farm CLI")


def get_project_root() -> Path:
    return Path(__file__).parent.parent.parent


def _alembic(*args: str) -> None:
    # Use the alembic executable from the active virtual environment
    alembic_path = str(Path(sys.executable).parent / "alembic")
    result = subprocess.run([alembic_path, *args], cwd=get_project_root())
    if result.returncode != 0:
        raise typer.Exit(code=result.returncode)


@app.command()
def run(
    host: str = "0.0.0.0",
    port: int = 8000,
    reload: bool = False,
) -> None:
    """
    Run the web server
    """
    uvicorn.run(
        "devon_farm.main:app",
        host=host,
        port=port,
        reload=reload,
    )


@app.command()
def migrate() -> None:
    """
    Apply Alembic migrations
    """
    _alembic("upgrade", "head")


@app.command()
def makemigration(message: str) -> None:
    """
    Create a new migration
    """
    _alembic("revision", "--autogenerate", "-m", message)


if __name__ == "__main__":
    app()
