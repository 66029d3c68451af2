"""Flask HTTP interface."""
