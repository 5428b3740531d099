"""Resolution core: policy, content types and the resolver."""
