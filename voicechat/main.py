#!/usr/bin/env python3
"""
Hands-free chat control with a Gradio demo UI.

- recognizer callbacks -> transcript source -> controller event queue
- microphone chunks -> spectrum analyser -> audio level events
- final transcripts -> intent parser -> command executor -> chat store
- Gradio UI -> listening control, live transcript, chats and command log
"""

import logging

from .app.gradio_ui import launch


def main():
    """Main entry point for the voice chat demo."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    launch()


if __name__ == "__main__":
    main()
