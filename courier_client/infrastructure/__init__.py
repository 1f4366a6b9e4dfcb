"""HTTP gateway, token storage and order cache."""
