"""Incremental-search record lookup: headless selector state machine plus a Tk control."""
