"""L3 Detection — read-only probes of installed executables."""
