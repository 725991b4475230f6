"""Sample AuthSub web flow routes."""
