"""
autoshadow CLI commands.
"""
