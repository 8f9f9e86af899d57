# Core module

"""
Core Module - trigger parsing and action application.

Key responsibilities:
- Duration tokens (15m, 1h, 2d, 1w)
- Trigger definition grammar
- Applying an action to one Slack identity (presence, status, DND)
- Fanning an action out to every linked Slack identity
"""
