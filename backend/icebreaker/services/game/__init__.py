"""Game domain services: rooms, seats, pairings, answers and scoring.

This package contains the core game rules that HTTP routes and CLI commands
call into, keeping transport concerns separated from the room / seat /
pairing / answer state machine. Services raise ``icebreaker.errors`` types
and commit their own transactions.
"""
