"""Implementation modules for :mod:`bedrock_proxy.base.cancellation`."""
