"""
Billing Notifier - scheduled AWS month-to-date cost report for Telegram.

This package provides:
- Cost Explorer provider abstraction (Real/Mock)
- Column-aligned MarkdownV2 report formatting
- Telegram Bot API notifier (Telegram/Mock)
- Lambda handler and command-line entry point
"""

__version__ = "0.1.0"
