"""Entry point for running the NiceGUI layout editor."""

from floorplan.app import run


if __name__ in {"__main__", "__mp_main__"}:
    run()
