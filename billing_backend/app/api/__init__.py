"""HTTP layer of the billing backend."""
