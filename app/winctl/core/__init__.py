"""Core reconciliation logic for winctl."""
