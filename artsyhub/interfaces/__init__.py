"""HTTP interface layer."""
