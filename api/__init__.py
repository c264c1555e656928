"""HTTP interface for the household ledger."""
