"""
Hebrew Study Backend - Services Layer
======================================

What:  Business rules between the routes (HTTP) and the database.
How:   Services receive the request's AsyncSession, issue statements on it and
       return response schemas. They flush but never commit; the session
       dependency owns the transaction.

Service Inventory:
    - IdentityProvider (abstract): token → AuthenticatedUser
    - SupabaseIdentityProvider: httpx client with retries and a circuit breaker
    - SessionService: start / heartbeat / end of study sessions
    - VocabSetService: list, exclusive activate, toggle
    - BibleService: ordered list of Bible books
"""
