"""Module entrypoint for ``python -m lazystart``.

This keeps module-mode execution behavior identical to the CLI script.
All argument parsing and dispatch happen in ``lazystart.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
