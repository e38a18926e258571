"""Target stack, configuration and cluster access shared by all commands."""
