"""One-protocol-per-file interfaces; import from `bedrock_proxy.base.interfaces`."""
