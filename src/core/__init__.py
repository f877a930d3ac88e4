"""Core domain package for packscope.

Core contains the classifier, cache contract, pagination, sessions and command
logic without any Telegram or storage-specific code, keeping it portable.
"""
