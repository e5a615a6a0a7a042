#!/usr/bin/env python3
"""
Ambient Mixer - Main Entry Point

Run this file to start the application:
    python main.py
"""

import logging

logging.basicConfig(
    filename="debug.log",
    filemode="a",
    level=logging.DEBUG,
    format="[%(name)s] %(message)s",
)

from ambientmixer.gui import MixerApp


def main():
    app = MixerApp()
    app.run()


if __name__ == "__main__":
    main()
