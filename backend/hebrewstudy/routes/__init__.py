"""
Hebrew Study Backend - API Routes Package
==========================================

Route Inventory:
    - bible.py:      GET  /api/bible/books
    - sessions.py:   POST /api/vocab/session/start
                     POST /api/vocab/session/heartbeat
                     POST /api/vocab/session/end
    - vocab_sets.py: GET  /api/vocab/sets
                     POST /api/vocab/sets/{set_id}/activate
                     POST /api/vocab/sets/toggle-active
    - health.py:     GET  /health

Routes stay thin: read the request, call a service, return its model.
Errors are raised, never formatted here; main.py's handlers build envelopes.
"""
