"""HTTP primitives — immutable Request, chainable Response, headers, cookies."""
