"""
Services Layer

Pure tournament-structuring logic that:
- Accepts domain inputs (players, ids, results)
- Returns domain outputs (positions, groups, rounds, standings)
- Does NOT depend on HTTP request/response objects
- Does NOT persist anything
"""
