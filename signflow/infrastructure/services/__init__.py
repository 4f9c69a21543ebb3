"""Infrastructure services: mail transport, notification templates, sweeper runner."""
