"""Building blocks for RPC benchmarking: options, peer lists, request input, rate limits and metrics."""

__version__ = "0.1.0"