"""Order lifecycle and session enums, and the courier-side state machine."""
