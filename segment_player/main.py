"""``python -m segment_player.main``: open the segment player window."""
from __future__ import annotations

import app


def main() -> None:
    app.launch()


if __name__ == "__main__":
    main()
