"""
Services Layer

Bracket and qualifier logic that:
- Accepts domain inputs (IDs, team lists, sessions)
- Returns domain outputs (match skeletons, models, outcomes)
- Does NOT depend on HTTP request/response objects
- Writes only through MatchStore
"""
