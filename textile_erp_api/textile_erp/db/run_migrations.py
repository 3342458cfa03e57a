"""
Programmatic Alembic runner; no alembic.ini required.

Usage examples:
    python -m textile_erp.db.run_migrations upgrade head
    python -m textile_erp.db.run_migrations downgrade -1
    python -m textile_erp.db.run_migrations current
"""

import sys
from pathlib import Path
from typing import Callable, Dict, List

from alembic import command
from alembic.config import Config

from textile_erp.db.config import get_settings

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

# command name -> (alembic function, default positional args)
_COMMANDS: Dict[str, tuple[Callable[..., None], List[str]]] = {
    "upgrade": (command.upgrade, ["head"]),
    "downgrade": (command.downgrade, ["-1"]),
    "history": (command.history, []),
    "current": (command.current, []),
    "heads": (command.heads, []),
    "revision": (command.revision, []),
}


# PUBLIC_INTERFACE
def build_config() -> Config:
    """Alembic Config pointing at the packaged migrations directory."""
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    # Used for offline mode; env.py connects through asyncpg online.
    cfg.set_main_option("sqlalchemy.url", get_settings().sync_database_url)
    return cfg


# PUBLIC_INTERFACE
def main(argv: List[str] | None = None) -> None:
    """Run an Alembic command, e.g. main(["upgrade", "head"])."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("No Alembic arguments provided. Example: upgrade head")
        sys.exit(1)

    cmd, other = args[0], args[1:]
    if cmd not in _COMMANDS:
        print(f"Unsupported Alembic command: {cmd}")
        sys.exit(2)

    func, defaults = _COMMANDS[cmd]
    func(build_config(), *(other or defaults))


if __name__ == "__main__":
    main()
