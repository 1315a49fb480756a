"""HTTP surface seen by handlers: request view, response builder, headers."""
