"""Module entrypoint for ``python -m lazyselect``.

All argument parsing and engine setup happen in ``lazyselect.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
