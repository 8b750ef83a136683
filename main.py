#!/usr/bin/env python3
"""
netcup DDNS - Main Entry Point

This is the main entry point for the netcup dynamic DNS updater.
It can be run directly or imported as a module.
"""

from netcup_ddns.cli.main import main

if __name__ == "__main__":
    main()
