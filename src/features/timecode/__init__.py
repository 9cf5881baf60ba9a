"""
Timecode feature module.

Handles:
- HH:MM:SS:FF conversions at 30 fps (domain)
- The ClockEngine that writes the current timecode into the Store (application)
"""
