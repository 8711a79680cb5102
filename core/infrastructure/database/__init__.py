"""Database persistence for run leases and run history."""
