"""Infra — implementações concretas de IO (persistência local)."""
