#!/usr/bin/env python3
"""
Kinect Gesture Bridge
Source-checkout launcher; the installed console script is ``kinect-gesture-bridge``.
"""

from kinect_bridge.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
