"""Core settings shared by the CLI, the HTTP app and the repair passes."""
