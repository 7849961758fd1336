"""Token stream inspection and metrics."""

from .metrics import compute_tokenization_metrics, flatten, print_token_analysis, token_text

__all__ = ["compute_tokenization_metrics", "flatten", "print_token_analysis", "token_text"]
