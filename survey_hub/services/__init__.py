"""Business services: storage access, analytics, export and access links."""
