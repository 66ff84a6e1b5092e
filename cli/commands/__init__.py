"""
Command groups of the recordstore CLI.
"""
