"""Feature packages (workflow engine, metadata readers, submission)."""
