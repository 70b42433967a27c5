from __future__ import annotations
import sys
from tomatl.app import run_app


def main() -> int:
    """Console entrypoint for `tomatl` and `python -m tomatl`."""
    return run_app(sys.argv)


if __name__ == "__main__":
    raise SystemExit(main())
