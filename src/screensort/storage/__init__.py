"""Storage utilities: settings database and atomic JSON documents."""
