"""
IdeaFlow Backend — Services Layer
===================================

What:  Business logic between the routes (HTTP) and the database.
How:   Services are stateless singletons; each call receives the request's
       AsyncSession. Routes stay thin: parse input, call one service, return.

Service Inventory:
    - UserService: registration, login, profiles (bcrypt via passlib)
    - CallerResolver / HeaderCallerResolver: who is making the request
    - CaseService: case creation and lifecycle-table reads
    - LifecycleService: the atomic accept and complete transitions
    - ReviewService: append-only reviews
    - FileStorage / LocalFileStorage: uploaded file bytes → URL paths
"""
