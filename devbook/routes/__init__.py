"""
Devbook API — Routes Package
=============================

What:  The route table. Routes are plain `Route` values built from
       controller instances and registered by `configure()`; handlers stay
       thin and delegate to the controllers.

Modules:
    - table.py:  Route record + configure()
    - auth.py:   POST /login
    - users.py:  /users and follower routes
    - posts.py:  /posts routes
    - health.py: GET /health
"""
