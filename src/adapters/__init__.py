"""Adapters binding the core ports to Telegram, Pillow, SQLite and HTTP."""
