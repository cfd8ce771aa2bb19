"""
Runnable menu bar manager application.
"""
