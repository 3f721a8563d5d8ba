"""Supipi - open the application launcher on a double-tap of SUPER.

Watches one keyboard through evdev and starts the launcher (wofi by
default) when the left SUPER key is pressed twice in quick succession.
"""
