"""One-class-per-file domain models; import from `bedrock_proxy.base.models`."""
