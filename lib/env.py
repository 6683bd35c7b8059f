from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv


def load_env(root: Path | None = None) -> bool:
    """
    Load .env into the process environment.

    Looks for `<root>/.env`, then the common `.env/.env` layout.
    Existing environment variables win. Returns True if a file was loaded.
    """
    base = root or Path(".")

    env_path = base / ".env"
    if env_path.is_file():
        return load_dotenv(dotenv_path=env_path)

    alt = base / ".env" / ".env"
    if alt.is_file():
        return load_dotenv(dotenv_path=alt)

    return False
