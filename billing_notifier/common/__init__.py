"""Common components shared by notifier entry points."""
