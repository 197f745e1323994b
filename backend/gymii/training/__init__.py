"""Workout session domain: plans, timers, snapshots and the session controller."""
