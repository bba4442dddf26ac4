"""Wizards of the flow engine, each registering its handlers with the engine registry."""
