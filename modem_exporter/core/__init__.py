"""Client, registry and poller for the modem exporter."""
