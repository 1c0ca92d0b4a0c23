"""Pure domain values: clock, outcomes and change events.  No I/O."""
