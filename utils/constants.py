"""
Application-wide constants.
Centralizes magic numbers and configuration values.
"""

from datetime import timedelta

# Reminder engine defaults
REMINDER_HORIZON = timedelta(days=7)  # Furthest look-ahead for a deferred timer
SWEEP_PERIOD = timedelta(minutes=5)
NOTIFICATION_DISPLAY_WINDOW = timedelta(seconds=10)

# Largest delay a single host timer can represent (signed 32-bit milliseconds)
MAX_TIMER_DELAY = timedelta(milliseconds=2**31 - 1)

# New items become due one day after creation
INITIAL_REVIEW_DELAY = timedelta(hours=24)

# Display formatting
DUE_ITEMS_DISPLAY_LIMIT = 10
