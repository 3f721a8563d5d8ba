"""Shared infrastructure: logging, version lookup and the evdev backend."""
