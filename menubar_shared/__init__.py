"""
Data model and rule tables shared by the engine and the application shell.
"""
