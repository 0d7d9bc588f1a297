"""HTTP access layer: transport, request functions and pagination."""
