"""Motion subsystem for spotgait."""
