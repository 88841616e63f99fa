"""System integration: filesystem paths."""
