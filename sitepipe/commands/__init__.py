"""sitepipe.commands - Long-running commands: dev server and watch mode."""
