"""Launch the Halbleiter puzzle window."""

from __future__ import annotations

from halbleiter.ui.main import main


if __name__ == "__main__":
    raise SystemExit(main())
