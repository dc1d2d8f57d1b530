"""Public package surface for lazystart.

Exports ``main`` for programmatic CLI invocation.
The entry engine lives in ``lazystart.entries``; runtime plumbing
(directories, config, timers, watcher, loop) in ``lazystart.runtime``.
"""

from __future__ import annotations

__version__ = "0.1.0"


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = ["main"]
