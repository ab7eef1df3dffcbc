"""
Loading and live-reloading of the release index.

This package is responsible for:
* Parsing the backing JSON document into a fresh store generation.
* Owning the published generation and swapping in rebuilt ones.
* Watching the backing file's modification time in the background.
"""
