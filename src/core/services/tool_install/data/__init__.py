"""L0 Data — static constants. No logic."""
