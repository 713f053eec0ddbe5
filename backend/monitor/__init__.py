"""Portfolio monitor service: storage, clients, services and API."""
