"""Ledger domain: records, directives, merging, ranks and the mutation/persistence core."""
