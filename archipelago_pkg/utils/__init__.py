"""Dataset loading and result formatting helpers."""
