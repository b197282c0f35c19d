"""Herald: conditional outbound webhooks for apply results."""
