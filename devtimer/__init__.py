"""DevTimer: coding-activity tracking API."""
