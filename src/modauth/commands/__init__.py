"""Built-in CLI sub-commands for modauth."""
