#!/usr/bin/env python3
"""Simple runner script for Media Sniffer."""

import sys

def main():
    args = sys.argv[1:]
    if "--help" in args or "-h" in args:
        print("""
Media Sniffer - find video links on any web page

Usage:
    python run.py input.url=URL [overrides]

Overrides:
    input.file=PATH         read page HTML from a file; URL is only the base
    output.format=json      print downloader JSON instead of a table
    fetcher.timeout=30      page fetch timeout in seconds
    engine.enable_heuristic=false

Examples:
    python run.py input.url=https://example.com/watch/42
    python run.py input.url=https://example.com/ input.file=saved.html output.format=json
""")
        return

    try:
        from media_sniffer.main import main as cli_main
    except ImportError as e:
        print(f"Module import failed: {e}")
        print("\nInstall with:")
        print("  pip install -e .")
        sys.exit(1)

    cli_main()

if __name__ == "__main__":
    main()
