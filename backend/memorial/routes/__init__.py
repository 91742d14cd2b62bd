# Routes package init
"""
Memorial Backend - API Routes Package
======================================

Route Inventory:
    - engagers.py:  POST /api/get-engagers            (ranked engager lookup)
    - generate.py:  POST /api/generate-memorial-nft   (compose + pin)
    - health.py:    GET  /health                      (service health check)

Routes stay thin: parse the body, call a service, return the model.
"""
