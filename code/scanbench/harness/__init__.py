"""Buffer management, engine interface and the timed driver."""
