"""Cross-cutting helpers shared by the ledger services."""
