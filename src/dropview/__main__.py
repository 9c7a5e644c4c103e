"""Entry point for `python -m dropview`."""

import argparse
import sys


def _print_info() -> None:
    from importlib.metadata import PackageNotFoundError, version

    from dropview.app import build_registry
    from dropview.utils.config import config_dir, load_settings

    try:
        print(f"dropview {version('dropview')}")
    except PackageNotFoundError:
        print("dropview (not installed)")
    print(f"config: {config_dir()}")
    registry = build_registry(load_settings())
    print(f"viewers: {', '.join(registry.names)}")


def main() -> None:
    if len(sys.argv) > 1 and sys.argv[1] == "info":
        _print_info()
        return

    parser = argparse.ArgumentParser(
        prog="dropview",
        description="Terminal viewer for dropped files and folders",
    )
    parser.add_argument(
        "paths", nargs="*", metavar="path",
        help="Files or folders to open",
    )
    # "Open with" launchers may append flags of their own; those reach the
    # dispatcher's path check instead of aborting startup.
    args, extra = parser.parse_known_args()

    from dropview.app import run
    run([*args.paths, *extra])


if __name__ == "__main__":
    main()
