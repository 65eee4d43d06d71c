"""
IdeaFlow Backend — API Routes Package
=======================================

Route Inventory:
    - health.py:           GET  /health, GET /api
    - users.py:            POST /api/register, POST /api/login,
                           GET  /api/current-user,
                           GET|PUT /api/profile/{id}, POST /api/upload-photo
    - cases.py:            POST|GET /api/cases, GET /api/cases/{id},
                           PUT  /api/cases/{id}/accept
    - processed_cases.py:  GET  /api/processed-cases[/{id}],
                           POST /api/processed-cases/{id}/upload-files,
                           PUT  /api/processed-cases/{id}/complete
    - projects.py:         GET  /api/projects[/{id}]
    - reviews.py:          GET|POST /api/reviews
    - frontend.py:         GET  /{path} (prebuilt SPA, registered last)

Routes stay thin: extract input, call one service, return its schema.
"""
