"""HTTP transport for the Hokm engine."""
