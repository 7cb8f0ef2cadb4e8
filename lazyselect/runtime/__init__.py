"""Runtime support: control lock, background scans, config and logging."""
