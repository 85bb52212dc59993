"""Shell adapters — argv commands and sourced shell functions."""
