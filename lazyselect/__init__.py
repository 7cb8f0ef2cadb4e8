"""Public package surface for lazyselect.

Exports ``main`` for programmatic CLI invocation.
The engine lives in ``lazyselect.engine``; the building blocks live in the
``file_tree_model``, ``tree_model``, ``selection`` and ``operations``
subpackages.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
