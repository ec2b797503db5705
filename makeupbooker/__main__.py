#!/usr/bin/env python3
"""
Convenience entry point for running makeupbooker as a module.

Usage: python -m makeupbooker [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
